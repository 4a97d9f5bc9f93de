import numpy as np
import pytest

from abcdnet.core.errors import CheckpointIOError, MalformedInputError, NotFoundError, ValidationError
from abcdnet.core.network import ABCDNetwork
from abcdnet.core.types import Topology
from abcdnet.data import weights as weights_io


def _random_network(sizes, seed=0):
    network = ABCDNetwork(sizes)
    network.randomize_weights(-1.0, 1.0, rng=np.random.default_rng(seed))
    return network


def test_save_then_load_reproduces_weights_exactly(tmp_path):
    network = _random_network([3, 4, 5, 2], seed=9)
    path = network.save_weights(tmp_path / "w.txt")

    other = ABCDNetwork([3, 4, 5, 2])
    other.load_weights(path)
    for a, b in zip(network.weights, other.weights):
        assert np.array_equal(a, b)


def test_checkpoint_layout():
    topology = Topology.from_sizes([2, 2, 2, 1])
    weights = [
        np.array([[1.0, 0.5], [-0.25, 2.0]]),
        np.array([[0.1, 0.2], [0.3, 0.4]]),
        np.array([[1.5], [-1.5]]),
    ]
    text = weights_io.dumps(topology, weights)
    assert text == (
        "NUM_LAYERS:4\n"
        "LAYER_SIZES:2-2-2-1\n"
        "\n"
        "1.0,0.5\n"
        "-0.25,2.0\n"
        "\n"
        "0.1,0.2\n"
        "0.3,0.4\n"
        "\n"
        "1.5\n"
        "-1.5\n"
    )
    parsed_topology, parsed = weights_io.loads(text)
    assert parsed_topology == topology
    assert [m.shape for m in parsed] == [(2, 2), (2, 2), (2, 1)]


def test_layer_size_mismatch_is_rejected_before_rows_are_read():
    network = _random_network([2, 2, 2, 1])
    text = weights_io.dumps(network.topology, network.weights)
    # rows would not parse, but the header check fires first
    truncated = text.split("\n\n")[0] + "\n"
    with pytest.raises(ValidationError, match="do not match the network layer sizes"):
        weights_io.loads(truncated, expected=Topology.from_sizes([2, 3, 2, 1]))


def test_wrong_layer_count_is_rejected():
    text = "NUM_LAYERS:3\nLAYER_SIZES:2-2-1\n"
    with pytest.raises(ValidationError, match="number of layers"):
        weights_io.loads(text)
    with pytest.raises(ValidationError):
        weights_io.loads("NUM_LAYERS:4\nLAYER_SIZES:2-2-1\n")


@pytest.mark.parametrize(
    "text",
    [
        "LAYERS:4\nLAYER_SIZES:2-2-2-1\n",
        "NUM_LAYERS:four\nLAYER_SIZES:2-2-2-1\n",
        "NUM_LAYERS:4\nLAYER_SIZES:2-2-2-1\n\n1.0,2.0\n",
        "NUM_LAYERS:4\nLAYER_SIZES:2-2-2-1\n\n1.0,x\n1.0,1.0\n",
        "NUM_LAYERS:4\nLAYER_SIZES:2-2-2-1\n1.0,1.0\n",
    ],
)
def test_malformed_checkpoints_are_rejected(text):
    with pytest.raises(MalformedInputError):
        weights_io.loads(text)


def test_failed_load_leaves_weights_untouched(tmp_path):
    network = _random_network([2, 2, 2, 1], seed=4)
    before = [w.copy() for w in network.weights]
    wrong = _random_network([2, 3, 2, 1])
    path = wrong.save_weights(tmp_path / "wrong.txt")

    with pytest.raises(ValidationError):
        network.load_weights(path)
    with pytest.raises(NotFoundError):
        network.load_weights(tmp_path / "missing.txt")
    for a, b in zip(before, network.weights):
        assert np.array_equal(a, b)


def test_save_creates_parent_directories(tmp_path):
    network = _random_network([2, 2, 2, 1])
    path = network.save_weights(tmp_path / "nested" / "dir" / "w.txt")
    assert path.exists()


def test_save_into_a_directory_raises_checkpoint_error(tmp_path):
    network = _random_network([2, 2, 2, 1])
    target = tmp_path / "taken"
    target.mkdir()
    with pytest.raises(CheckpointIOError):
        network.save_weights(target)
    assert isinstance(CheckpointIOError("x"), OSError)


def test_checkpoint_that_is_not_utf8_is_malformed(tmp_path):
    network = _random_network([2, 2, 2, 1])
    path = tmp_path / "w.txt"
    path.write_bytes(b"NUM_LAYERS:4\nLAYER_SIZES:2-2-2-1\n\n\xff\xfe,1.0\n")
    before = [w.copy() for w in network.weights]
    with pytest.raises(MalformedInputError, match="not valid UTF-8"):
        network.load_weights(path)
    for a, b in zip(before, network.weights):
        assert np.array_equal(a, b)


def test_rows_after_the_last_matrix_are_rejected():
    network = _random_network([2, 2, 2, 1])
    text = weights_io.dumps(network.topology, network.weights)
    assert weights_io.loads(text + "\n\n")[0] == network.topology
    with pytest.raises(MalformedInputError, match="unexpected data"):
        weights_io.loads(text + "9.0\n9.0\n9.0\n")
