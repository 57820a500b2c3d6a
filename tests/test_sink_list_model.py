import pytest

from netdisplays.sink_list_model import Provider, SinkListModel


class _Sink:
    def __init__(self, name):
        self.name = name


@pytest.fixture
def provider():
    return Provider()


@pytest.fixture
def model(provider):
    return SinkListModel(provider)


def _recorder(model):
    changes = []
    model.items_changed.connect(lambda *args: changes.append(args))
    return changes


def test_new_model_is_empty(model, provider):
    assert len(model) == 0
    assert list(model) == []
    assert model.provider is provider


def test_model_without_provider():
    model = SinkListModel()
    assert model.provider is None
    assert len(model) == 0


def test_added_sinks_keep_order(model, provider):
    first, second = _Sink("a"), _Sink("b")
    provider.sink_added.emit(first)
    provider.sink_added.emit(second)
    assert list(model) == [first, second]
    assert model[0] is first
    assert model[1] is second
    assert len(model) == 2


def test_add_reports_position_at_end(model, provider):
    changes = _recorder(model)
    provider.sink_added.emit(_Sink("a"))
    provider.sink_added.emit(_Sink("b"))
    assert changes == [(0, 0, 1), (1, 0, 1)]


def test_remove_reports_position(model, provider):
    sinks = [_Sink(n) for n in "abc"]
    for sink in sinks:
        provider.sink_added.emit(sink)
    changes = _recorder(model)
    provider.sink_removed.emit(sinks[1])
    assert changes == [(1, 1, 0)]
    assert list(model) == [sinks[0], sinks[2]]


def test_none_sink_is_ignored(model, provider):
    changes = _recorder(model)
    provider.sink_added.emit(None)
    provider.sink_removed.emit(None)
    assert len(model) == 0
    assert changes == []


def test_removing_unknown_sink_changes_nothing(model, provider):
    known = _Sink("a")
    provider.sink_added.emit(known)
    changes = _recorder(model)
    provider.sink_removed.emit(_Sink("b"))
    assert list(model) == [known]
    assert changes == []


def test_index_out_of_range(model, provider):
    sink = _Sink("only")
    provider.sink_added.emit(sink)
    assert model[0] is sink
    with pytest.raises(IndexError):
        model[1]


def test_changing_provider_disconnects_old(model, provider):
    other = Provider()
    model.provider = other
    assert len(provider.sink_added) == 0
    assert len(provider.sink_removed) == 0
    provider.sink_added.emit(_Sink("old"))
    assert len(model) == 0
    sink = _Sink("new")
    other.sink_added.emit(sink)
    assert list(model) == [sink]


def test_clearing_provider(model, provider):
    model.provider = None
    assert model.provider is None
    provider.sink_added.emit(_Sink("a"))
    assert len(model) == 0


def test_iteration_is_a_snapshot(model, provider):
    provider.sink_added.emit(_Sink("a"))
    iterator = iter(model)
    provider.sink_added.emit(_Sink("b"))
    assert len(list(iterator)) == 1
    assert len(model) == 2