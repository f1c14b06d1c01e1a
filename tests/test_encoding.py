import numpy as np
import pytest

from forecast2048.environment.encoding import (
    SpawnedTile,
    decode_row,
    decode_state,
    decode_tile,
    encode_row,
    encode_state,
    encode_tile,
    encoded_length,
    tile_exponent,
)

from conftest import reachable_boards


@pytest.mark.parametrize("grid, words", [
    ([[32, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]], [5, 0, 0]),
    ([[32, 0, 0, 0], [0, 0, 0, 0], [0, 0, 1024, 0], [0, 0, 0, 0]], [5, 10485760, 0]),
    ([[32, 0, 0, 0], [0, 0, 8, 0], [0, 0, 1024, 0], [0, 0, 0, 0]], [5, 10485763, 0]),
    ([[32, 16, 0, 0], [0, 0, 8, 0], [0, 0, 1024, 0], [0, 0, 0, 0]], [133, 10485763, 0]),
])
def test_encode_and_decode_known_boards(grid, words):
    encoded = encode_state(np.array(grid))
    assert encoded.dtype == np.uint32
    assert encoded.tolist() == words
    assert decode_state(np.array(words, dtype=np.uint32)).tolist() == grid


def test_encoded_board_takes_three_words():
    assert encoded_length((4, 4)) == 3
    assert encoded_length((2, 2)) == 1
    assert encode_state(np.zeros((4, 4), dtype=np.int64)).nbytes == 12


def test_encoding_and_decoding_are_inverses():
    grid = np.array([[2, 4, 8, 16], [32, 64, 0, 65536], [65536] * 4, [0, 0, 0, 2]])
    assert np.array_equal(decode_state(encode_state(grid)), grid)

    encoded = np.array([5000, 1234, 19999], dtype=np.uint32)
    assert np.array_equal(encode_state(decode_state(encoded)), encoded)


def test_reachable_boards_round_trip():
    for board in reachable_boards():
        assert np.array_equal(decode_state(encode_state(board)), board)


def test_oversized_exponents_wrap():
    grid = np.zeros((4, 4), dtype=np.int64)
    grid[0, 0] = 2 ** 33
    assert decode_state(encode_state(grid))[0, 0] == 2


def test_tile_exponent():
    assert tile_exponent(0) == 0
    assert tile_exponent(2) == 1
    assert tile_exponent(2048) == 11


def test_row_codec():
    num = encode_row([2, 8, 0, 16])
    assert num == 1 + 3 * 32 + 4 * 32 ** 3
    assert decode_row(num) == [2, 8, 0, 16]


def test_tile_hash():
    assert encode_tile(SpawnedTile(2, 3, 2)) == 11
    assert encode_tile(SpawnedTile(2, 3, 4)) == 27
    assert decode_tile(11) == SpawnedTile(2, 3, 2)
    assert decode_tile(27) == SpawnedTile(2, 3, 4)
