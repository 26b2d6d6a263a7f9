import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np

def plot_barcode_distribution(distribution, filename=None, ax=None, color=None, log_scale=False):
    """Bar chart of reads per barcode (a Tally.distribution() DataFrame)."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(max(4, 0.3*len(distribution)), 4))
    if color is None:
        color = sns.color_palette()[0]
    X = np.arange(len(distribution))
    ax.bar(X, distribution['reads'].values, color=color)
    ax.set_xticks(X)
    ax.set_xticklabels(distribution.index, rotation=90, size='x-small')
    ax.set(xlabel='Barcode', ylabel='Deconvolved reads', xlim=[-0.5, len(distribution)-0.5])
    if log_scale:
        ax.set_yscale('log')
    sns.despine(ax=ax)
    if filename is not None:
        plt.tight_layout()
        plt.savefig(filename)
        plt.close(ax.figure)
    return ax
