"""
Compact binary representation of boards, rows and spawned tiles.

Each tile is stored as its base-2 exponent (0 for an empty cell) on
ENCODING_BITS bits, packed row-major into 32-bit words. With 5 bits per tile a
word holds 6 tiles, so a 4x4 board fits in three words (12 bytes). This is the
layout used for the undo history and for every node of the forecast search.
"""

from typing import List, Tuple, NamedTuple

import numpy as np

from ..config import ENCODING_BITS, GAME_GRID_SIZE_N, GAME_GRID_SIZE_M

TILES_PER_WORD = 32 // ENCODING_BITS
EXPONENT_MASK = (1 << ENCODING_BITS) - 1


class SpawnedTile(NamedTuple):
    row: int
    col: int
    value: int


def tile_exponent(tile: int) -> int:
    """Exponent k of a tile 2**k, 0 for an empty cell."""
    tile = int(tile)
    return tile.bit_length() - 1 if tile > 0 else 0


def encoded_length(shape: Tuple[int, int] = (GAME_GRID_SIZE_N, GAME_GRID_SIZE_M)) -> int:
    return -(-shape[0] * shape[1] // TILES_PER_WORD)


def encode_state(grid) -> np.ndarray:
    """
    Pack a board into an array of uint32 words.

    Exponents wider than ENCODING_BITS wrap around, no validation is done.
    """
    grid = np.asarray(grid)
    encoded = np.zeros(encoded_length(grid.shape), dtype=np.uint32)
    words = [0] * len(encoded)
    for idx, tile in enumerate(grid.flat):
        if tile:
            k, count = divmod(idx, TILES_PER_WORD)
            words[k] |= (tile_exponent(tile) & EXPONENT_MASK) << (ENCODING_BITS * count)
    encoded[:] = words
    return encoded


def decode_state(encoded, shape: Tuple[int, int] = (GAME_GRID_SIZE_N, GAME_GRID_SIZE_M)) -> np.ndarray:
    """Unpack words produced by encode_state back into a board of the given shape."""
    n, m = shape
    grid = np.zeros((n, m), dtype=np.int64)
    flat = grid.reshape(-1)
    for idx in range(n * m):
        k, count = divmod(idx, TILES_PER_WORD)
        exponent = (int(encoded[k]) >> (ENCODING_BITS * count)) & EXPONENT_MASK
        if exponent:
            flat[idx] = 1 << exponent
    return grid


def encode_row(row) -> int:
    """Pack a single row into one integer, first tile in the lowest bits."""
    num = 0
    for count, tile in enumerate(row):
        if tile:
            num |= (tile_exponent(tile) & EXPONENT_MASK) << (ENCODING_BITS * count)
    return num


def decode_row(num: int, width: int = GAME_GRID_SIZE_M) -> List[int]:
    row = [0] * width
    for i in range(width):
        exponent = num & EXPONENT_MASK
        num >>= ENCODING_BITS
        if exponent:
            row[i] = 1 << exponent
    return row


def encode_tile(tile: SpawnedTile, shape: Tuple[int, int] = (GAME_GRID_SIZE_N, GAME_GRID_SIZE_M)) -> int:
    """Hash a spawned tile to row * M + col, offset by N * M when it is a 4."""
    n, m = shape
    return tile.row * m + tile.col + (n * m if tile.value == 4 else 0)


def decode_tile(num: int, shape: Tuple[int, int] = (GAME_GRID_SIZE_N, GAME_GRID_SIZE_M)) -> SpawnedTile:
    n, m = shape
    if num >= n * m:
        value = 4
        num -= n * m
    else:
        value = 2
    row, col = divmod(num, m)
    return SpawnedTile(row, col, value)
