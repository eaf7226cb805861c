from __future__ import annotations

from datetime import timedelta

from school_management.common.datetime_utils import now_local
from school_management.core.enums import PolicyScope
from school_management.extensions import db
from school_management.policies.model import AttendancePolicy


def _add(name, scope, *, threshold=75, school_id=None, class_id=None, effective_from, effective_to=None, active=True):
    policy = AttendancePolicy(
        name=name,
        scope=scope,
        school_id=school_id,
        class_id=class_id,
        concern_threshold=threshold,
        effective_from=effective_from,
        effective_to=effective_to,
        is_active=active,
    )
    db.session.add(policy)
    db.session.commit()
    return policy


def test_expired_and_future_policies_are_skipped(app, container, ids):
    with app.app_context():
        at = now_local()
        _add("expired", PolicyScope.CLASS, threshold=91, school_id=ids["school"], class_id=ids["class"],
             effective_from=at - timedelta(days=30), effective_to=at - timedelta(days=1))
        _add("future", PolicyScope.CLASS, threshold=92, school_id=ids["school"], class_id=ids["class"],
             effective_from=at + timedelta(days=1))
        _add("edge", PolicyScope.SCHOOL, threshold=93, school_id=ids["school"],
             effective_from=at - timedelta(days=5), effective_to=at)

        policy = container.policy_service.get_effective_policy(class_id=ids["class"], school_id=ids["school"], now=at)
        assert policy.name == "edge"
        assert policy.concern_threshold == 93

        # One second past effective_to the school policy no longer applies
        later = container.policy_service.get_effective_policy(
            class_id=ids["class"], school_id=ids["school"], now=at + timedelta(seconds=1)
        )
        assert later.scope == PolicyScope.GLOBAL


def test_inactive_rows_are_ignored(app, container, ids):
    with app.app_context():
        at = now_local()
        _add("switched off", PolicyScope.CLASS, threshold=60, school_id=ids["school"], class_id=ids["class"],
             effective_from=at - timedelta(days=3), active=False)

        assert container.policies_repo.find_current(PolicyScope.CLASS, at=at, class_id=ids["class"]) is None
        policy = container.policy_service.get_effective_policy(class_id=ids["class"], now=at)
        assert policy.scope == PolicyScope.GLOBAL
        assert policy.concern_threshold == 80


def test_newest_effective_from_wins(app, container, ids):
    with app.app_context():
        at = now_local()
        _add("older", PolicyScope.CLASS, threshold=70, school_id=ids["school"], class_id=ids["class"],
             effective_from=at - timedelta(days=10))
        _add("newer", PolicyScope.CLASS, threshold=85, school_id=ids["school"], class_id=ids["class"],
             effective_from=at - timedelta(days=2))
        _add("other class", PolicyScope.CLASS, threshold=50, school_id=ids["school"], class_id=ids["other_class"],
             effective_from=at - timedelta(days=1))

        policy = container.policies_repo.find_current(PolicyScope.CLASS, at=at, class_id=ids["class"])
        assert policy.name == "newer"
        assert policy.concern_threshold == 85

        # Before the newer one starts, the older one is in force
        earlier = container.policies_repo.find_current(PolicyScope.CLASS, at=at - timedelta(days=5), class_id=ids["class"])
        assert earlier.name == "older"
