"""Tests for DataLoader against the in-memory FakeQueryClient from conftest."""
from __future__ import annotations

from cap_dashboard import CapTableState, DataLoader, FOUNDATION, REGULAR, Notice, SelectorState
from cap_dashboard.commands import AddShareholder, AddInvestment


def _loaded(client):
    loader = DataLoader(client, max_workers=4)
    state = CapTableState()
    result = loader.load(state)
    return loader, state, result


def test_load_populates_every_collection(fake_client):
    _, state, result = _loaded(fake_client)
    assert result.ok
    assert result.notices == [Notice("success", "Data loaded", "Cap table data has been loaded successfully")]
    assert [s.name for s in state.shareholders] == ["Alice Founder", "Bob Angel"]
    assert state.shareholder_count == 2
    assert [e.name for e in state.esops] == ["2024 Pool"]
    assert [l.name for l in state.loans] == ["Bridge"]
    assert [c.name for c in state.share_classes] == ["Common", "Preferred"]
    assert [r.id for r in state.foundation.rounds] == ["fr-1", "fr-2"]
    assert [r.id for r in state.regular.rounds] == ["r-1", "r-2"]
    assert state.loaded_at is not None


def test_load_selects_first_round_of_each_bucket(fake_client):
    _, state, _ = _loaded(fake_client)
    assert state.foundation.state == SelectorState.INVESTMENTS_READY
    assert state.foundation.selected.id == "fr-1"
    assert [i.id for i in state.foundation.investments] == ["inv-1", "inv-2"]
    assert state.regular.selected.id == "r-1"
    seed = state.regular.investments[0]
    assert seed.shareholder_label == "Unknown"
    assert seed.share_class_label == "Preferred"


def test_rounds_are_split_by_foundation_flag(fake_client):
    _loaded(fake_client)
    round_filters = [c[2] for c in fake_client.operations("select") if c[1] == "funding_rounds"]
    assert sorted(f["is_foundation"] for f in round_filters) == [False, True]


def test_load_on_empty_store(empty_client):
    _, state, result = _loaded(empty_client)
    assert result.ok
    assert state.shareholders == []
    assert state.foundation.state == SelectorState.NO_ROUNDS_LOADED
    assert state.regular.investments == []


def test_partial_failure_keeps_other_collections(fake_client):
    fake_client.fail("esops")
    _, state, result = _loaded(fake_client)
    assert not result.ok
    assert result.failed == ["esops"]
    assert result.notices[0] == Notice("error", "Error loading data", "There was a problem loading the cap table data")
    assert state.esops == []
    assert len(state.shareholders) == 2
    assert len(state.loans) == 1


def test_failed_refresh_keeps_last_known_values(fake_client):
    loader, state, _ = _loaded(fake_client)
    fake_client.tables["loans"].append({"id": "ln-2", "name": "Venture debt", "amount": 1})
    fake_client.fail("loans")
    result = loader.refresh(state)
    assert result.failed == ["loans"]
    assert result.notices == [Notice("error", "Error", "Could not refresh cap table data")]
    assert [l.id for l in state.loans] == ["ln-1"]


def test_refresh_refetches_selected_rounds(fake_client):
    loader, state, _ = _loaded(fake_client)
    fake_client.tables["investments"].append(
        {"id": "inv-5", "round_id": "r-1", "number_of_shares": 10, "share_price": 2.5, "capital_invested": 25,
         "shareholders": {"id": "sh-1", "name": "Alice Founder"}, "share_classes": None}
    )
    result = loader.refresh(state)
    assert result.ok
    assert result.notices == [Notice("success", "Updated", "Cap table data has been refreshed")]
    assert [i.id for i in state.regular.investments] == ["inv-3", "inv-5"]
    assert state.regular.selected.id == "r-1"


def test_refresh_after_failed_fan_out_skips_round_details(fake_client):
    loader, state, _ = _loaded(fake_client)
    fake_client.fail("shareholder_investments")
    before = len(fake_client.operations("select"))
    loader.refresh(state)
    investment_reads = [c for c in fake_client.operations("select")[before:] if c[1] == "investments"]
    assert investment_reads == []
    assert state.regular.selected.id == "r-1"


def test_select_round_loads_its_investments(fake_client):
    loader, state, _ = _loaded(fake_client)
    result = loader.select_round(state, REGULAR, "r-2")
    assert result.ok
    assert result.notices == []
    assert state.regular.selected.id == "r-2"
    assert [i.id for i in state.regular.investments] == ["inv-4"]


def test_select_round_failure_keeps_previous_round(fake_client):
    loader, state, _ = _loaded(fake_client)
    fake_client.fail("investments")
    result = loader.select_round(state, REGULAR, "r-2")
    assert result.notices == [Notice("error", "Error", "Could not load round details")]
    assert result.failed == ["regular:r-2"]
    assert state.regular.selected.id == "r-1"
    assert [i.id for i in state.regular.investments] == ["inv-3"]


def test_select_sentinel_and_unknown_round_do_not_query(fake_client):
    loader, state, _ = _loaded(fake_client)
    before = len(fake_client.calls)
    assert loader.select_round(state, FOUNDATION, "missing").ok
    assert loader.select_round(state, FOUNDATION, "select").ok
    assert len(fake_client.calls) == before
    assert state.foundation.selected is None


def test_initial_investment_failure_keeps_first_round_selected(fake_client):
    fake_client.fail("investments")
    _, state, result = _loaded(fake_client)
    assert result.notices == [
        Notice("success", "Data loaded", "Cap table data has been loaded successfully"),
        Notice("error", "Error", "Could not load round details"),
        Notice("error", "Error", "Could not load round details"),
    ]
    assert state.foundation.selected.id == "fr-1"
    assert state.foundation.selected_round_id == "fr-1"
    assert state.foundation.investments == []
    assert state.regular.selected.id == "r-1"
    assert state.regular.investments == []


def test_failed_load_reports_a_single_error(fake_client):
    fake_client.fail("esops")
    fake_client.fail("investments")
    _, state, result = _loaded(fake_client)
    assert result.notices == [Notice("error", "Error loading data", "There was a problem loading the cap table data")]
    assert sorted(result.failed) == ["esops", "foundation:fr-1", "regular:r-1"]
    assert state.foundation.selected.id == "fr-1"


def test_execute_runs_command_then_refreshes(fake_client):
    loader, state, _ = _loaded(fake_client)
    before = len(fake_client.calls)
    outcome, result = loader.execute(state, AddShareholder("  Carol  ", "carol@example.com"))
    assert outcome.record_id == "1000"
    assert result.notices[0] == Notice("success", "Shareholder added", "Carol has been added to the cap table")
    assert result.notices[1].title == "Updated"
    later = fake_client.calls[before:]
    assert later[0] == ("insert", "shareholders", {"name": "Carol", "contact": "carol@example.com"})
    assert any(c[0] == "select" for c in later[1:])


def test_execute_investment_shows_up_in_selected_round(fake_client):
    loader, state, _ = _loaded(fake_client)
    outcome, result = loader.execute(state, AddInvestment("r-1", "sh-2", 100, 3))
    assert result.ok
    added = [i for i in state.regular.investments if i.id == outcome.record_id]
    assert len(added) == 1
    assert added[0].capital_invested == 300


def test_execute_validation_error_skips_write_and_refresh(fake_client):
    loader, state, _ = _loaded(fake_client)
    before = len(fake_client.calls)
    outcome, result = loader.execute(state, AddShareholder("   "))
    assert outcome is None
    assert result.failed == ["AddShareholder"]
    assert result.notices == [Notice("error", "Missing name", "Please enter a shareholder name.")]
    assert len(fake_client.calls) == before


def test_execute_write_failure_reports_database_error(fake_client):
    loader, state, _ = _loaded(fake_client)
    fake_client.fail("shareholders", "duplicate key")
    outcome, result = loader.execute(state, AddShareholder("Carol"))
    assert outcome is None
    assert result.notices == [Notice("error", "Database error", "duplicate key")]
