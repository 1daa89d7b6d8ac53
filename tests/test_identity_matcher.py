import pytest

from pose_tracking.tracker.identity_matcher import IdentityMatcher


@pytest.fixture
def matcher(clock, sequential_ids):
    return IdentityMatcher(distance_threshold=0.1, age_threshold_ms=2000,
                           clock=clock, id_factory=sequential_ids)


def test_end_to_end_scenario(matcher, make_observation):
    [first] = matcher.to_poses([make_observation(0.50, 0.50)], timestamp=0)
    [second] = matcher.to_poses([make_observation(0.52, 0.50)], timestamp=33)
    [third] = matcher.to_poses([make_observation(0.90, 0.50)], timestamp=66)

    assert first.pose_id == "A"
    assert second.pose_id == "A"
    assert third.pose_id == "B"
    assert len(matcher) == 2


def test_id_is_stable_under_small_steps(matcher, make_observation):
    ids = set()
    x = 0.1
    for i in range(40):
        x += 0.02
        [sample] = matcher.to_poses([make_observation(x, 0.5)], timestamp=i * 33)
        ids.add(sample.pose_id)
    assert ids == {"A"}
    assert len(matcher) == 1


def test_centroid_and_last_seen_follow_match(matcher, make_observation):
    matcher.to_poses([make_observation(0.50, 0.50)], timestamp=0)
    matcher.to_poses([make_observation(0.55, 0.52)], timestamp=40)
    [identity] = matcher.identities
    assert identity.centroid.x == pytest.approx(0.55)
    assert identity.centroid.y == pytest.approx(0.52)
    assert identity.first_seen == 0
    assert identity.last_seen == 40


def test_two_bodies_in_one_frame(matcher, make_observation):
    samples = matcher.to_poses([make_observation(0.2, 0.5), make_observation(0.8, 0.5)], timestamp=0)
    assert [s.pose_id for s in samples] == ["A", "B"]
    samples = matcher.to_poses([make_observation(0.79, 0.5), make_observation(0.21, 0.5)], timestamp=33)
    assert [s.pose_id for s in samples] == ["B", "A"]


def test_jump_after_prune_yields_new_id(matcher, make_observation):
    [a] = matcher.to_poses([make_observation(0.5, 0.5)], timestamp=0)
    # Past the age threshold the prune drops A, and the far jump mints a new id
    [b] = matcher.to_poses([make_observation(0.9, 0.5)], timestamp=2500)
    assert a.pose_id == "A"
    assert b.pose_id == "B"
    assert [i.id for i in matcher.identities] == ["B"]


def test_stale_identity_matchable_until_next_prune(matcher, make_observation):
    [a] = matcher.to_poses([make_observation(0.2, 0.5)], timestamp=0)
    [b] = matcher.to_poses([make_observation(0.8, 0.5)], timestamp=1500)

    # Prune runs here: A (unseen 2100 ms) goes, B (unseen 600 ms) stays
    [c] = matcher.to_poses([make_observation(0.2, 0.5)], timestamp=2100)
    assert c.pose_id not in (a.pose_id, b.pose_id)

    # B is now older than the threshold, but the next prune is not due yet
    [again] = matcher.to_poses([make_observation(0.8, 0.5)], timestamp=3600)
    assert again.pose_id == b.pose_id


def test_prune_is_throttled(matcher, make_observation):
    matcher.to_poses([make_observation(0.5, 0.5)], timestamp=0)
    matcher.to_poses([], timestamp=2001)
    assert matcher.last_prune == 2001
    assert len(matcher) == 0

    matcher.to_poses([make_observation(0.5, 0.5)], timestamp=2002)
    matcher.to_poses([], timestamp=3000)
    # Not pruned again within the interval
    assert matcher.last_prune == 2001


def test_empty_frame_is_noop(matcher, make_observation):
    matcher.to_poses([make_observation(0.5, 0.5)], timestamp=0)
    assert matcher.to_poses([], timestamp=100) == []
    assert len(matcher) == 1


def test_sample_carries_landmarks_and_timestamp(matcher, make_observation):
    observation = make_observation(0.5, 0.5, width=0.2, height=0.3)
    [sample] = matcher.to_poses([observation], timestamp=123.0)
    assert sample.landmarks == observation.landmarks
    assert sample.world_landmarks == observation.world_landmarks
    assert sample.timestamp == 123.0


def test_uses_clock_without_timestamp(matcher, clock, make_observation):
    [sample] = matcher.to_poses([make_observation(0.5, 0.5)])
    assert sample.timestamp == clock.now
    clock.advance(50)
    sample = matcher.to_pose(make_observation(0.5, 0.5))
    assert sample.timestamp == clock.now
    assert sample.pose_id == "A"


def test_default_ids_are_unique(make_observation):
    matcher = IdentityMatcher()
    samples = matcher.to_poses([make_observation(0.1 + i * 0.15, 0.5) for i in range(6)], timestamp=0)
    ids = [s.pose_id for s in samples]
    assert len(set(ids)) == 6
    assert all(isinstance(i, str) and i for i in ids)


def test_reset(matcher, make_observation):
    matcher.to_poses([make_observation(0.5, 0.5)], timestamp=0)
    matcher.reset()
    assert len(matcher) == 0
    assert matcher.last_prune == 0
