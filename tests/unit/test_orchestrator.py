"""Scenario tests for full publication cycles."""

import json
import os
from datetime import timedelta

import pytest

from rsyncdir.common.exceptions import ErrorCode, RsyncDirError
from rsyncdir.constants import CycleOutcome, SwapStrategy
from rsyncdir.rsync.orchestrator import remove_orphaned_revisions, update_from_rrdp_state
from rsyncdir.rsync.revision import DeprecatedRsyncRevision, RsyncRevision
from rsyncdir.rsync.snapshot import RepositoryObject, RrdpSnapshot
from rsyncdir.rsync.state import RsyncDirState

from conftest import NOW, OTHER_SESSION_ID, SESSION_ID

STRATEGIES = [SwapStrategy.SYMLINK, SwapStrategy.RENAME]


def _snapshot(serial, objects=None, session_id=SESSION_ID):
    objects = objects if objects is not None else {"rsync://x/y.cer": b"y-%d" % serial}
    return RrdpSnapshot(
        session_id=session_id,
        serial=serial,
        objects=[RepositoryObject(uri=uri, data=data) for uri, data in objects.items()],
    )


def _revision(serial, session_id=SESSION_ID):
    return RsyncRevision(session_id=session_id, serial=serial)


def _revision_dirs(base_dir):
    return sorted(p.name for p in base_dir.iterdir() if RsyncRevision.from_dir_name(p.name))


@pytest.mark.parametrize("strategy", STRATEGIES)
class TestPublicationScenarios:
    """First run, second run and cleanup run for both swap strategies."""

    def test_first_run(self, base_dir, make_settings, clock, strategy):
        settings = make_settings(strategy)

        outcome = update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        assert outcome == CycleOutcome.PUBLISHED
        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(1)
        assert state.old == []
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-1"
        if strategy == SwapStrategy.SYMLINK:
            assert (_revision(1).path(base_dir) / "y.cer").read_bytes() == b"y-1"
            assert os.readlink(base_dir / "current") == _revision(1).dir_name

    def test_second_run_with_changes(self, base_dir, make_settings, clock, strategy):
        settings = make_settings(strategy)
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        clock.advance(timedelta(minutes=1))

        outcome = update_from_rrdp_state(_snapshot(2), True, settings=settings, clock=clock)

        assert outcome == CycleOutcome.PUBLISHED
        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(2)
        assert state.old == [DeprecatedRsyncRevision(since=clock.now(), revision=_revision(1))]
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-2"
        # Still within retention
        assert (_revision(1).path(base_dir) / "y.cer").read_bytes() == b"y-1"

    def test_cleanup_run(self, base_dir, make_settings, clock, strategy):
        settings = make_settings(strategy, cleanup_after=600)
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        update_from_rrdp_state(_snapshot(2), True, settings=settings, clock=clock)
        clock.advance(timedelta(seconds=601))

        outcome = update_from_rrdp_state(_snapshot(2), False, settings=settings, clock=clock)

        assert outcome == CycleOutcome.NO_OP
        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(2)
        assert state.old == []
        assert not _revision(1).path(base_dir).exists()
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-2"

    def test_session_reset_publishes_new_lineage(self, base_dir, make_settings, clock, strategy):
        settings = make_settings(strategy)
        update_from_rrdp_state(_snapshot(10), True, settings=settings, clock=clock)

        update_from_rrdp_state(_snapshot(1, session_id=OTHER_SESSION_ID), True, settings=settings, clock=clock)

        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(1, OTHER_SESSION_ID)
        assert [d.revision for d in state.old] == [_revision(10)]
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-1"


class TestNoOpCycle:
    """Test cycles without content changes."""

    def test_no_op_leaves_current_and_writes_nothing(self, base_dir, settings, clock):
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        before = _revision_dirs(base_dir)

        outcome = update_from_rrdp_state(_snapshot(2), False, settings=settings, clock=clock)

        assert outcome == CycleOutcome.NO_OP
        assert _revision_dirs(base_dir) == before
        assert RsyncDirState.recover(settings.state_path).current == _revision(1)
        assert os.readlink(base_dir / "current") == _revision(1).dir_name

    def test_no_op_on_first_run_persists_empty_state(self, base_dir, settings, clock):
        outcome = update_from_rrdp_state(_snapshot(1), False, settings=settings, clock=clock)

        assert outcome == CycleOutcome.NO_OP
        assert RsyncDirState.recover(settings.state_path) == RsyncDirState()
        assert not os.path.lexists(base_dir / "current")
        assert _revision_dirs(base_dir) == []

    def test_no_op_still_prunes(self, base_dir, settings, clock):
        expired = _revision(1)
        expired.path(base_dir).mkdir()
        RsyncDirState(
            current=_revision(2),
            old=[DeprecatedRsyncRevision(since=clock.now() - timedelta(hours=1), revision=expired)],
        ).persist(settings.state_path)

        update_from_rrdp_state(_snapshot(2), False, settings=settings, clock=clock)

        assert not expired.path(base_dir).exists()
        assert RsyncDirState.recover(settings.state_path).old == []


class TestFailedCycles:
    """Test that failures abort the cycle without persisting the ledger."""

    def test_corrupted_ledger_aborts_before_writing(self, base_dir, settings, clock):
        settings.state_path.write_text("{broken", encoding="utf-8")

        with pytest.raises(RsyncDirError) as exc_info:
            update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        assert exc_info.value.error_code == ErrorCode.STATE_CORRUPTED
        assert _revision_dirs(base_dir) == []
        assert settings.state_path.read_text(encoding="utf-8") == "{broken"

    def test_write_failure_keeps_previous_revision_live(self, base_dir, settings, clock):
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        state_before = settings.state_path.read_bytes()

        with pytest.raises(RsyncDirError) as exc_info:
            update_from_rrdp_state(
                _snapshot(2, {"rsync://host/repo/../escape.cer": b"x"}),
                True,
                settings=settings,
                clock=clock,
            )

        assert exc_info.value.error_code == ErrorCode.INVALID_URI
        assert os.readlink(base_dir / "current") == _revision(1).dir_name
        assert settings.state_path.read_bytes() == state_before

    def test_switch_failure_does_not_update_ledger(self, base_dir, settings, clock):
        class FailingSwitch:
            strategy = SwapStrategy.SYMLINK

            def publish(self, new_revision, state):
                raise RsyncDirError("switch failed", ErrorCode.PUBLISH_ERROR)

        with pytest.raises(RsyncDirError):
            update_from_rrdp_state(
                _snapshot(1), True, settings=settings, clock=clock, switch=FailingSwitch()
            )

        assert not settings.state_path.exists()
        # Orphaned until a later cycle or the orphan sweep removes it
        assert _revision_dirs(base_dir) == [_revision(1).dir_name]

    def test_republishing_current_revision_is_rejected(self, base_dir, settings, clock):
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        with pytest.raises(RsyncDirError) as exc_info:
            update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-1"


class TestRecoveryFromEarlierFailures:
    """Test cycles that find leftovers of a crashed cycle."""

    def test_incomplete_directory_is_rewritten(self, base_dir, settings, clock):
        leftover = _revision(1).path(base_dir)
        leftover.mkdir()
        (leftover / "partial.cer").write_bytes(b"half")

        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        assert not (leftover / "partial.cer").exists()
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-1"

    def test_live_but_unrecorded_revision_is_adopted(self, base_dir, settings, clock):
        """Test the ledger catches up when the switch succeeded but persist did not."""
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        live = _revision(2).path(base_dir)
        live.mkdir()
        (live / "y.cer").write_bytes(b"y-2")
        os.symlink(_revision(2).dir_name, base_dir / "current.tmp")
        os.replace(base_dir / "current.tmp", base_dir / "current")

        update_from_rrdp_state(_snapshot(2), True, settings=settings, clock=clock)

        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(2)
        assert [d.revision for d in state.old] == [_revision(1)]
        assert (base_dir / "current" / "y.cer").read_bytes() == b"y-2"


    @pytest.mark.parametrize("remove_orphans", [False, True])
    def test_live_unrecorded_revision_is_deprecated_when_replaced(
        self, base_dir, make_settings, clock, remove_orphans
    ):
        """Test a revision that went live before a crash keeps its retention window."""
        settings = make_settings(remove_orphans=remove_orphans)
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        live = _revision(2).path(base_dir)
        live.mkdir()
        (live / "y.cer").write_bytes(b"y-2")
        os.symlink(_revision(2).dir_name, base_dir / "current.tmp")
        os.replace(base_dir / "current.tmp", base_dir / "current")
        clock.advance(timedelta(minutes=1))

        update_from_rrdp_state(_snapshot(3), True, settings=settings, clock=clock)

        state = RsyncDirState.recover(settings.state_path)
        assert state.current == _revision(3)
        assert state.old == [
            DeprecatedRsyncRevision(since=clock.now(), revision=_revision(1)),
            DeprecatedRsyncRevision(since=clock.now(), revision=_revision(2)),
        ]
        assert (live / "y.cer").read_bytes() == b"y-2"

        clock.advance(timedelta(seconds=601))
        update_from_rrdp_state(_snapshot(3), False, settings=settings, clock=clock)

        assert not live.exists()
        assert RsyncDirState.recover(settings.state_path).old == []

class TestOrphanSweep:
    """Test removal of revision directories unknown to the ledger."""

    def test_disabled_by_default(self, base_dir, settings, clock):
        orphan = _revision(5, OTHER_SESSION_ID).path(base_dir)
        orphan.mkdir()

        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)

        assert orphan.is_dir()

    def test_enabled_removes_only_orphans(self, base_dir, make_settings, clock):
        settings = make_settings(remove_orphans=True)
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        orphan = _revision(5, OTHER_SESSION_ID).path(base_dir)
        orphan.mkdir()
        (orphan / "a.cer").write_bytes(b"a")
        unrelated = base_dir / "static"
        unrelated.mkdir()

        update_from_rrdp_state(_snapshot(2), True, settings=settings, clock=clock)

        assert not orphan.exists()
        assert unrelated.is_dir()
        assert _revision(1).path(base_dir).is_dir()
        assert _revision(2).path(base_dir).is_dir()
        assert settings.state_path.exists()

    def test_live_symlink_target_is_kept(self, base_dir, settings):
        live = _revision(3).path(base_dir)
        live.mkdir()
        os.symlink(live.name, base_dir / "current")

        removed = remove_orphaned_revisions(settings, RsyncDirState())

        assert removed == []
        assert live.is_dir()

    def test_missing_base_dir(self, tmp_path, make_settings):
        settings = make_settings()
        settings = settings.model_copy(update={"base_dir": tmp_path / "absent"})
        assert remove_orphaned_revisions(settings, RsyncDirState()) == []


class TestLedgerFile:
    """Test the ledger file written by a cycle."""

    def test_ledger_is_json_next_to_revisions(self, base_dir, settings, clock):
        update_from_rrdp_state(_snapshot(1), True, settings=settings, clock=clock)
        update_from_rrdp_state(_snapshot(2), True, settings=settings, clock=clock)

        data = json.loads((base_dir / ".rsync_state.json").read_text(encoding="utf-8"))

        assert data["current"] == {"session_id": str(SESSION_ID), "serial": 2}
        assert data["old"] == [{
            "since": NOW.isoformat().replace("+00:00", "Z"),
            "revision": {"session_id": str(SESSION_ID), "serial": 1},
        }]
