"""
Unit tests for placement resolution.

Tests cover:
- Root creation on an empty store
- Recruiter resolution order
- Bubble-up owner selection and pass-up
- Mirror placement into the recruiter's matrix
- Policy selection
"""

import pytest

from matrix_system.config.placement import PlacementPolicy
from matrix_system.errors import MatrixFullError, MatrixOwnerNotFoundError, MemberNotFoundError
from matrix_system.services.placement_service import (
    BubbleUpStrategy,
    FlatStrategy,
    PlacementService,
    PlacementStrategy,
    getStrategy,
)


class TestRootPlacement:
    """Test the very first placement."""

    def test_empty_store_resolves_root(self, engine):
        placement = engine.placement.resolve(desiredPosition=(2, 3))

        assert placement.isRoot
        assert (placement.level, placement.slot) == (0, 0)
        assert placement.ownerId is None
        assert placement.parentId is None
        assert not placement.isSpillover

    def test_root_ignores_recruiter(self, engine):
        placement = engine.placement.resolve(recruiterRef="member-404")
        assert placement.isRoot


class TestRecruiterResolution:
    """Test explicit ref -> current view -> root."""

    def test_defaults_to_root(self, engine, root):
        placement = engine.placement.resolve()
        assert placement.recruiterId == root.memberID
        assert placement.ownerId == root.memberID

    def test_current_view_used(self, engine, root):
        a = engine.addMember("A")
        placement = engine.placement.resolve(currentViewId=a.memberID)
        assert placement.recruiterId == a.memberID

    def test_explicit_ref_wins(self, engine, root):
        a = engine.addMember("A")
        b = engine.addMember("B")
        placement = engine.placement.resolve(recruiterRef=b.memberID, currentViewId=a.memberID)
        assert placement.recruiterId == b.memberID

    def test_unknown_recruiter(self, engine, root):
        with pytest.raises(MemberNotFoundError) as excInfo:
            engine.placement.resolve(recruiterRef="member-404")
        assert "Recruiter member-404 not found" in str(excInfo.value)


class TestBubbleUp:
    """Test default policy."""

    def test_owner_is_recruiters_parent(self, engine, root):
        a = engine.addMember("A")
        engine.addMember("B")

        placement = engine.placement.resolve(recruiterRef=a.memberID)

        assert placement.ownerId == root.memberID
        assert (placement.level, placement.slot) == (2, 0)
        assert placement.parentId == a.memberID
        assert placement.isSpillover

    def test_level2_recruiter_bubbles_to_level1_parent(self, engine, root):
        a = engine.addMember("A")
        engine.addMember("B")
        c = engine.addMember("C", recruiterId=a.memberID)

        placement = engine.placement.resolve(recruiterRef=c.memberID)

        assert c.parentID == a.memberID
        assert placement.ownerId == a.memberID

    def test_dangling_parent(self, engine, root):
        a = engine.addMember("A")
        a.parentID = "member-gone"
        engine.session.commit()

        with pytest.raises(MatrixOwnerNotFoundError) as excInfo:
            engine.placement.resolve(recruiterRef=a.memberID)
        assert excInfo.value.memberId == "member-gone"

    def test_resolve_does_not_mutate(self, engine, root):
        a = engine.addMember("A")
        before = engine.store.countMembers()
        rowsBefore = len(engine.store.findOwnerMatrix(root.memberID))

        engine.placement.resolve(recruiterRef=a.memberID)

        assert engine.store.countMembers() == before
        assert len(engine.store.findOwnerMatrix(root.memberID)) == rowsBefore

    def test_full_terminal_root(self, engine, root):
        root.stage = 7
        engine.session.commit()
        for index in range(6):
            engine.addMember(f"M{index}")

        with pytest.raises(MatrixFullError) as excInfo:
            engine.placement.resolve()
        assert excInfo.value.ownerId == root.memberID


class TestMirror:
    """Test recruiter copies."""

    def test_mirror_into_recruiter_matrix(self, engine, root):
        a = engine.addMember("A")
        placement = engine.placement.resolve(recruiterRef=a.memberID)

        assert placement.mirror is not None
        assert placement.mirror.ownerId == a.memberID
        assert (placement.mirror.level, placement.mirror.slot) == (1, 0)
        assert placement.mirror.parentId == a.memberID

    def test_no_mirror_when_recruiter_is_owner(self, engine, root):
        placement = engine.placement.resolve(recruiterRef=root.memberID)
        assert placement.mirror is None

    def test_mirror_disabled(self, make_engine):
        engine = make_engine(mirrorToRecruiter=False)
        engine.addMember("Root")
        a = engine.addMember("A")

        placement = engine.placement.resolve(recruiterRef=a.memberID)
        assert placement.mirror is None


class TestDesiredPosition:
    """Test caller-chosen slots."""

    def test_desired_free_slot_used(self, engine, root):
        placement = engine.placement.resolve(desiredPosition=(1, 1))
        assert (placement.level, placement.slot) == (1, 1)

    def test_desired_orphan_level2_ignored(self, engine, root):
        placement = engine.placement.resolve(desiredPosition=(2, 0))
        assert (placement.level, placement.slot) == (1, 0)

    def test_desired_invalid_ignored(self, engine, root):
        placement = engine.placement.resolve(desiredPosition=(5, 9))
        assert (placement.level, placement.slot) == (1, 0)


class TestPolicySelection:
    """Test strategy lookup."""

    def test_default_policy(self, engine):
        assert isinstance(getStrategy(None), BubbleUpStrategy)
        assert engine.placement.policy == PlacementPolicy.BUBBLE_UP

    def test_policy_by_name(self):
        assert isinstance(getStrategy("flat"), FlatStrategy)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            getStrategy("random")

    def test_custom_strategy(self, engine, root):
        class AlwaysRightShoulder(PlacementStrategy):
            def findSlot(self, service, recruiter, root, desired):
                return root, (1, 1)

        service = PlacementService(engine.store, AlwaysRightShoulder(), mirrorToRecruiter=False)
        placement = service.resolve()

        assert (placement.level, placement.slot) == (1, 1)
        assert service.policy is None
