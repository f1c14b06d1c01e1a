import logging

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap, BoundaryNorm

logger = logging.getLogger(__name__)

# Color mapping for the 2048 game
TILE_COLORS = {
    0: "#CCC0B3",      # Empty
    2: "#EEE4DA",      # 2
    4: "#EDE0C8",      # 4
    8: "#F2B179",      # 8
    16: "#F59563",     # 16
    32: "#F67C5F",     # 32
    64: "#F65E3B",     # 64
    128: "#EDCF72",    # 128
    256: "#EDCC61",    # 256
    512: "#EDC850",    # 512
    1024: "#EDC53F",   # 1024
    2048: "#EDC22E",   # 2048
    4096: "#3E3933"    # 4096
}

def create_tile_colormap():
    """Create a colormap for the 2048 game tiles."""
    colors = []
    for tile in [0, 2, 4, 8, 16, 32, 64, 128, 256, 512, 1024, 2048, 4096]:
        colors.append(TILE_COLORS.get(tile, "#3C3A32"))
    # one more color for tiles beyond 4096
    colors.append("#2C2A22")
    return ListedColormap(colors)

def visualize_board_trajectory(board_states, filename="board_trajectory.png", title=None):
    """
    Visualize a sequence of board states from a game.

    Args:
        board_states: List of boards
        filename: Where to save the visualization
        title: Optional title for the plot

    Returns:
        The filename, or None when there was nothing to draw
    """
    num_states = len(board_states)
    if num_states == 0:
        logger.warning("No board states to visualize")
        return None

    # Sample at most 9 states evenly across the trajectory
    if num_states <= 9:
        indices = list(range(num_states))
        grid_size = int(np.ceil(np.sqrt(num_states)))
    else:
        indices = np.linspace(0, num_states - 1, 9, dtype=int).tolist()
        grid_size = 3
    states_to_show = [np.asarray(board_states[i]) for i in indices]

    fig, axes = plt.subplots(grid_size, grid_size, figsize=(12, 12))
    axes = np.atleast_1d(axes).flatten()

    cmap = create_tile_colormap()
    bounds = np.arange(-0.5, 14.5, 1)
    norm = BoundaryNorm(bounds, cmap.N)

    for ax, index, board in zip(axes, indices, states_to_show):
        # log2 scale for color mapping, capped at the last color
        display_board = np.zeros(board.shape, dtype=int)
        mask = board > 0
        display_board[mask] = np.minimum(np.log2(board[mask]).astype(int), 13)

        ax.imshow(display_board, cmap=cmap, norm=norm, interpolation='nearest')

        for row in range(board.shape[0]):
            for col in range(board.shape[1]):
                val = board[row, col]
                if val > 0:
                    text_color = "black" if val <= 4 else "white"
                    ax.text(col, row, str(val), ha='center', va='center',
                            color=text_color, fontsize=12, fontweight='bold')

        ax.set_title(f"Move {index}")
        ax.set_xticks([])
        ax.set_yticks([])

    # Hide any unused subplots
    for ax in axes[len(states_to_show):]:
        ax.axis('off')

    if title:
        fig.suptitle(title, fontsize=16)

    plt.tight_layout()
    plt.savefig(filename)
    plt.close(fig)
    logger.info(f"Saved board trajectory visualization to {filename}")
    return filename

def plot_evaluation_results(results, filename="evaluation_results.png"):
    """
    Plot the score of every game and the distribution of the highest tiles.

    Args:
        results: Dictionary returned by evaluate_agent
        filename: Where to save the plot
    """
    fig, (ax_scores, ax_tiles) = plt.subplots(1, 2, figsize=(14, 5))

    scores = results['scores']
    ax_scores.plot(range(1, len(scores) + 1), scores, marker='o')
    ax_scores.axhline(results['avg_score'], color='red', linestyle='--',
                      label=f"Average {results['avg_score']:.0f}")
    ax_scores.set_xlabel("Game")
    ax_scores.set_ylabel("Score")
    ax_scores.set_title("Score per game")
    ax_scores.legend()

    tiles = sorted(results['tile_counts'])
    counts = [results['tile_counts'][tile] for tile in tiles]
    ax_tiles.bar([str(tile) for tile in tiles], counts,
                 color=[TILE_COLORS.get(tile, "#3C3A32") for tile in tiles], edgecolor='black')
    ax_tiles.set_xlabel("Highest tile")
    ax_tiles.set_ylabel("Games")
    ax_tiles.set_title("Highest tile distribution")

    plt.tight_layout()
    plt.savefig(filename)
    plt.close(fig)
    logger.info(f"Saved evaluation plot to {filename}")
    return filename
