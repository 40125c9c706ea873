from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from claimsync import app
from claimsync.adapters.klaviyo import KlaviyoMarketingSource
from claimsync.domain.ports import SignalSources
from tests.helpers.builders import make_identity, make_incoming, make_order, make_shipment

if TYPE_CHECKING:
    from claimsync.domain.importing import ImportProgress
    from tests.helpers.fakes import FakeUnitOfWorkFactory


def test_build_signal_sources_skips_unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("REAMAZE_BRAND", "REAMAZE_LOGIN", "REAMAZE_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("KLAVIYO_API_KEY", "pk_test")

    sources = app.build_signal_sources()

    assert sources.support is None
    assert isinstance(sources.marketing, KlaviyoMarketingSource)


def test_import_orders_uses_configured_batch_size(
    monkeypatch: pytest.MonkeyPatch,
    fake_unit_of_work: FakeUnitOfWorkFactory,
) -> None:
    monkeypatch.setenv("CLAIMSYNC_IMPORT_BATCH_SIZE", "1")
    progress: list[ImportProgress] = []

    result = app.import_orders(
        [
            make_incoming("1001", source_order_id="1"),
            make_incoming("1002", source_order_id="2", customer_email="sam@example.com"),
        ],
        on_progress=progress.append,
        unit_of_work_factory=fake_unit_of_work,
    )

    assert result.created == 2
    assert [item.total_batches for item in progress] == [2, 2]


def test_score_customer_without_remote_sources(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    identity = make_identity(email="jane@example.com")
    fake_unit_of_work.identities.add(identity)

    score = app.score_customer(
        identity.id,
        sources=SignalSources(),
        unit_of_work_factory=fake_unit_of_work,
    )

    assert score is not None
    assert score.identity_id == identity.id
    assert fake_unit_of_work.risk_scores.get(identity.id) is not None


def test_link_shipments_logs_one_summary(
    fake_unit_of_work: FakeUnitOfWorkFactory,
    caplog: pytest.LogCaptureFixture,
) -> None:
    fake_unit_of_work.orders.add(make_order("1001"))

    with caplog.at_level(logging.INFO):
        result = app.link_shipments(
            [make_shipment(order_number="1001")],
            unit_of_work_factory=fake_unit_of_work,
        )

    assert result.matched == 1
    summaries = [
        record for record in caplog.records if "link finished" in record.getMessage().lower()
    ]
    assert len(summaries) == 1


def test_shipment_stats_counts_tracking(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    fake_unit_of_work.orders.add(make_order("1001", tracking_number="1Z999", carrier_code="ups"))
    fake_unit_of_work.orders.add(make_order("1002"))

    stats = app.shipment_stats(unit_of_work_factory=fake_unit_of_work)

    assert (stats.total_orders, stats.with_tracking, stats.without_tracking) == (2, 1, 1)
    assert stats.by_carrier == {"ups": 1}
