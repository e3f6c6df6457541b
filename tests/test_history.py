from history import HistoryEntry, HistorySequence, resolve


def test_resolves_latest_entry_not_after_month() -> None:
    history = HistorySequence.of(("2024-01", 1000), ("2024-06", 2000))

    assert history.resolve("2024-03", 0) == 1000
    assert history.resolve("2024-06", 0) == 2000
    assert history.resolve("2025-01", 0) == 2000
    assert history.resolve("2023-12", -1) == -1


def test_empty_history_returns_fallback() -> None:
    assert resolve([], "2024-01", 500) == 500
    assert HistorySequence().resolve("2024-01") is None


def test_upsert_replaces_same_month_and_keeps_order() -> None:
    history = HistorySequence.of(("2024-06", 2000), ("2024-01", 1000))
    updated = history.upsert("2024-06", 2500).upsert("2024-03", 1500)

    assert [(e.start_month, e.amount) for e in updated] == [
        ("2024-01", 1000),
        ("2024-03", 1500),
        ("2024-06", 2500),
    ]
    assert len(history) == 2
    assert history.resolve("2024-07") == 2000


def test_remove_entry() -> None:
    history = HistorySequence.of(("2024-01", 1000), ("2024-06", 2000)).remove("2024-06")
    assert history.resolve("2024-12") == 1000


def test_duplicate_months_last_encountered_wins() -> None:
    entries = [
        HistoryEntry("2024-01", 1),
        HistoryEntry("2024-01", 2),
        HistoryEntry("2024-05", 3),
    ]
    assert resolve(entries, "2024-02") == 2


def test_latest_start() -> None:
    history = HistorySequence.of(("2024-01", 1), ("2024-04", 2))
    assert history.latest_start("2024-03") == "2024-01"
    assert history.latest_start("2023-01") is None
