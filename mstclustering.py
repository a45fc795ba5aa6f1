import logging
import time
from argparse import ArgumentParser
from typing import List, Optional, Sequence, Tuple

import numpy as np
from matplotlib import pyplot as plt
from sklearn.datasets import make_blobs, make_circles, make_moons
from sklearn.metrics.cluster import completeness_score

from primgraph.exceptions import InvalidArgumentError
from primgraph.graph import Graph, Vertex, total_weight

logger = logging.getLogger(__name__)

# Defaults for the command line
DEFAULT_SAMPLES = 300
DEFAULT_SCALE = 1000
DEFAULT_SEED = 8
NOISE_FRACTION = 0.05

Dataset = Tuple[np.ndarray, np.ndarray, int, Optional[int]]


def add_uniform_noise(dataset: Tuple[np.ndarray, np.ndarray], n_samples: int, n_classes: int, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """
    Adds points drawn uniformly from the bounding box of the dataset.

    The noise points get `n_classes` as their class.
    """

    data_X, data_y = dataset
    low = data_X.min(axis=0)
    high = data_X.max(axis=0)
    noise = rng.uniform(low, high, size=(n_samples, data_X.shape[1]))
    return (np.vstack([data_X, noise]), np.concatenate([data_y, np.full(n_samples, n_classes)]))


def create_datasets(n_samples: int = DEFAULT_SAMPLES, seed: int = DEFAULT_SEED) -> List[Dataset]:
    """
    Returns a list of datasets.

    Returns
    -------

    A list of datasets, each a tuple of
        (`n_samples`, 2) matrix of points in 2D space,
        a vector with the class of every point,
        the number of expected classes,
        the class used for noise points, or `None` if there is no noise.
    """

    rng = np.random.default_rng(seed)
    n_noise_samples = max(1, int(n_samples * NOISE_FRACTION))
    datasets: List[Dataset] = []

    # Blobs
    n_classes = 3
    blobs = make_blobs(n_samples=n_samples, random_state=seed, centers=n_classes)
    datasets.append((blobs[0], blobs[1], n_classes, None))
    blobs_noise = add_uniform_noise(blobs, n_noise_samples, n_classes, rng)
    datasets.append((blobs_noise[0], blobs_noise[1], n_classes, n_classes))

    # Two moons
    n_classes = 2
    moons = make_moons(n_samples=n_samples, random_state=seed)
    datasets.append((moons[0], moons[1], n_classes, None))

    # Circles
    circles = make_circles(n_samples=n_samples, random_state=seed, factor=0.5)
    datasets.append((circles[0], circles[1], n_classes, None))

    return datasets


def perform_clustering(G: Graph, k: int) -> Tuple[Graph, List[List[Vertex]]]:
    """
    Splits a graph into `k` clusters by cutting its minimum spanning forest.

    The `k - 1` heaviest tree edges are dropped (fewer if the graph already
    has several components). `G` is reduced in place to the remaining forest.

    Parameters
    ----------

    G : The graph to cluster.

    k : The number of clusters to return.

    Returns
    -------

    The forest `G`.

    The clusters, one list of vertices per connected component of the forest.
    """

    if not 1 <= k <= G.num_vertices:
        raise InvalidArgumentError(f"Cannot make {k} clusters out of {G.num_vertices} vertices.")

    tree = G.mst()
    n_trees = G.num_vertices - len(tree)
    n_cuts = max(0, k - n_trees)
    if n_trees > k:
        logger.warning("Graph has %d components, more than the %d clusters asked for", n_trees, k)

    # Stable sort: among equal weights the later tree edges are cut first
    kept = sorted(tree, key=lambda edge: edge.weight)[:len(tree) - n_cuts]
    logger.info("Cutting %d of %d tree edges (forest weight %d)", n_cuts, len(tree), total_weight(kept))

    # Discard every non-tree edge and the cut ones
    G.clear_edges()
    for edge in kept:
        G.insert_edge(G.V[edge.u], G.V[edge.v], edge.weight)

    return G, G.connected_components()


def get_cluster_class(G: Graph, clusters: List[List[Vertex]]) -> np.ndarray:
    """
    Calculates the class index vector for all vertices.

    Parameters
    ----------

    G : The graph.

    clusters : The clusters of `G`.

    Returns
    -------

    The class of every vertex, indexed by vertex index. Classes are numbered in cluster order.
    """

    classes = np.full(G.num_vertices, -1, dtype=int)
    for label, cluster in enumerate(clusters):
        for vertex in cluster:
            classes[vertex.index] = label
    return classes


def get_cluster_completeness_score(groundtruth_clustering: Sequence[int], result_clustering: Sequence[int], noise_cluster_index: Optional[int] = None) -> float:
    groundtruth = np.asarray(groundtruth_clustering)
    result = np.asarray(result_clustering)
    if noise_cluster_index is not None:
        mask = groundtruth != noise_cluster_index
        groundtruth = groundtruth[mask]
        result = result[mask]
    return completeness_score(groundtruth, result)


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = ArgumentParser(description="Cluster toy datasets by cutting their minimum spanning tree.")
    parser.add_argument("--samples", type=int, default=DEFAULT_SAMPLES, help="Number of points per dataset")
    parser.add_argument("--threshold", type=float, default=float("inf"), help="Maximum distance between connected points")
    parser.add_argument("--scale", type=float, default=DEFAULT_SCALE, help="Factor turning distances into integer weights")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--plot", help="Show the datasets and their clusterings", action="store_true")
    parser.add_argument("--verbose", "-v", help="Log progress", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    datasets = create_datasets(args.samples, args.seed)

    for dataset_count, (data_X, data_y, n_classes, noise_class) in enumerate(datasets):
        G = Graph.create_from_points(data_X, threshold=args.threshold, scale=args.scale)

        start_time = time.time()
        _, clusters = perform_clustering(G, n_classes)
        end_time = time.time()

        result_y = get_cluster_class(G, clusters)
        score = get_cluster_completeness_score(data_y, result_y, noise_class)

        print(f"Dataset {dataset_count}: {len(data_X)} points | {len(clusters)} clusters | elapsed time: {end_time - start_time:.3f}s | completeness score: {score:.3f}")

        if args.plot:
            fig, (ax_data, ax_result) = plt.subplots(nrows=2, ncols=1)
            fig.suptitle(f"Dataset {dataset_count}", fontsize=16)
            fig.tight_layout()
            ax_data.set_title("Dataset")
            ax_data.scatter(data_X[:, 0], data_X[:, 1], marker="o", c=data_y, s=25)
            ax_result.set_title("Resulting clustering")
            ax_result.scatter(data_X[:, 0], data_X[:, 1], marker="o", c=result_y, s=25)

    if args.plot:
        plt.show()


if __name__ == '__main__':
    main()
