import logging

import numpy as np

from backpropnet.network import NeuralNetwork


def _trained_network(seed=3):
    net = NeuralNetwork([3, 4, 1], seed=seed)
    net.add_training_example((-1, -1, 1), (-1,), "t0")
    net.add_training_example((-1, 1, 1), (1,), "t1")
    net.add_training_example((1, -1, 1), (1,), "t2")
    net.add_control_example((1, 1, 1), (-1,), "c0")
    net.train(5, 0.0)
    return net


def _assert_same_parameters(a, b):
    for wa, wb in zip(a.model.weights, b.model.weights):
        assert np.array_equal(wa, wb)
    for ta, tb in zip(a.model.thresholds, b.model.thresholds):
        assert np.array_equal(ta, tb)


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "network.ini"
    source = _trained_network()
    assert source.save_to_file(path)

    text = path.read_text()
    assert "[weights]" in text and "[identifiers]" in text

    target = NeuralNetwork([3, 4, 1], seed=99)
    target.add_training_example((0, 0, 0), (0,), "stale")
    target.add_control_example((0, 0, 0), (0,), "stale")
    assert target.load_from_file(path)

    _assert_same_parameters(source, target)
    assert len(target.training_set) == 0
    assert len(target.control_set) == 0
    assert target.get_training_ids() == ["t0", "t1", "t2"]
    assert target.get_control_ids() == ["c0"]
    x = (0.3, -0.8, 1.0)
    assert np.array_equal(source.calculate(x), target.calculate(x))


def test_load_clears_examples_of_the_saving_network(tmp_path):
    path = tmp_path / "network.ini"
    net = _trained_network()
    assert net.save_to_file(path)
    assert net.load_from_file(path)
    assert len(net.training_set) == 0
    assert len(net.control_set) == 0
    assert net.get_training_ids() == ["t0", "t1", "t2"]


def test_loaded_network_is_initialised_and_trainable(tmp_path):
    path = tmp_path / "network.ini"
    assert _trained_network().save_to_file(path)
    net = NeuralNetwork([3, 4, 1], seed=1)
    assert net.load_from_file(path)
    before = [w.copy() for w in net.model.weights]
    net.add_training_example((-1, -1, 1), (-1,), "t0")
    net.train(1, 0.0)
    assert any(not np.array_equal(a, b) for a, b in zip(before, net.model.weights))


def test_missing_file_reports_failure(tmp_path, caplog):
    net = _trained_network()
    before = net.export_state()
    with caplog.at_level(logging.WARNING, logger="backpropnet.persistence"):
        assert not net.load_from_file(tmp_path / "absent.ini")
    assert "not found" in caplog.text
    _assert_same_parameters(net, NeuralNetwork.from_state(before))
    assert len(net.training_set) == 3


def test_unwritable_path_reports_failure(tmp_path):
    net = _trained_network()
    assert not net.save_to_file(tmp_path / "no-such-dir" / "network.ini")


def test_malformed_file_leaves_state_untouched(tmp_path):
    net = _trained_network()
    before = net.export_state()
    bad = tmp_path / "bad.ini"
    bad.write_text("[weights]\nedges = not json\nthresholds = []\n")
    assert not net.load_from_file(bad)
    garbage = tmp_path / "garbage.ini"
    garbage.write_text("edges without a section\n")
    assert not net.load_from_file(garbage)
    empty = tmp_path / "empty.ini"
    empty.write_text("[identifiers]\ntraining_data = []\n")
    assert not net.load_from_file(empty)
    undecodable = tmp_path / "undecodable.ini"
    undecodable.write_bytes(b"[weights]\nedges = \xff\xfe\n")
    assert not net.load_from_file(undecodable)
    scalars = tmp_path / "scalars.ini"
    scalars.write_text("[weights]\nedges = 5\nthresholds = null\n")
    assert not net.load_from_file(scalars)
    mapping = tmp_path / "mapping.ini"
    mapping.write_text("[weights]\nedges = [{\"a\": 1}]\nthresholds = []\n")
    assert not net.load_from_file(mapping)
    _assert_same_parameters(net, NeuralNetwork.from_state(before))
    assert len(net.training_set) == 3


def test_topology_mismatch_is_rejected(tmp_path):
    path = tmp_path / "network.ini"
    assert _trained_network().save_to_file(path)
    other = NeuralNetwork([3, 2, 1], seed=0)
    other.add_training_example((1, 1, 1), (1,))
    assert not other.load_from_file(path)
    assert not other.model.initialized
    assert len(other.training_set) == 1


def test_numpy_identifiers_are_saved_as_plain_values(tmp_path):
    path = tmp_path / "network.ini"
    net = NeuralNetwork([3, 4, 1], seed=2)
    for idx in np.arange(2):
        net.add_training_example((-1, 1, 1), (1,), idx)
    net.add_control_example((1, 1, 1), (-1,), np.str_("c0"))
    net.reset()
    assert net.save_to_file(path)

    target = NeuralNetwork([3, 4, 1], seed=0)
    assert target.load_from_file(path)
    assert target.get_training_ids() == [0, 1]
    assert target.get_control_ids() == ["c0"]


def test_unserialisable_identifier_reports_failure(tmp_path, caplog):
    path = tmp_path / "network.ini"
    net = NeuralNetwork([3, 4, 1], seed=2)
    net.add_training_example((-1, 1, 1), (1,), frozenset({"a"}))
    net.reset()
    with caplog.at_level(logging.ERROR, logger="backpropnet.persistence"):
        assert not net.save_to_file(path)
    assert "serialise" in caplog.text
    assert not path.exists()
