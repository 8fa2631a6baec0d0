from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from models import db, Swipe, Match, SwipeDirection
from repositories import ConflictError, StorageError, SqlSwipeRepository, SwipeCursor
from repositories.sql import _is_foreign_key_violation, _is_unique_violation
from utils.profiles import SqlProfileResolver
from utils.swiping import submit_swipe_batch


@pytest.fixture
def sql_repo(sql_users):
    return SqlSwipeRepository()


def test_insert_and_find_swipe(sql_repo):
    swipe = sql_repo.insert_swipe('U1', 'U2', SwipeDirection.LIKE)

    assert swipe.swiper_id == 'U1'
    assert swipe.direction is SwipeDirection.LIKE
    assert sql_repo.find_swipe('U1', 'U2') == swipe
    assert sql_repo.find_swipe('U1', 'U2', SwipeDirection.LIKE) == swipe
    assert sql_repo.find_swipe('U1', 'U2', SwipeDirection.PASS) is None
    assert sql_repo.find_swipe('U2', 'U1') is None


def test_duplicate_swipe_raises_conflict_and_session_recovers(sql_repo):
    sql_repo.insert_swipe('U1', 'U2', SwipeDirection.LIKE)

    with pytest.raises(ConflictError) as exc_info:
        sql_repo.insert_swipe('U1', 'U2', SwipeDirection.PASS)

    assert exc_info.value.table == 'swipes'
    assert exc_info.value.key == ('U1', 'U2')

    # Session was rolled back and is usable again
    sql_repo.insert_swipe('U1', 'U3', SwipeDirection.PASS)
    assert Swipe.query.count() == 2


def test_duplicate_match_raises_conflict(sql_repo):
    match = sql_repo.insert_match('U1', 'U2')
    assert match.active is True

    with pytest.raises(ConflictError):
        sql_repo.insert_match('U1', 'U2')

    assert Match.query.count() == 1
    assert sql_repo.find_match('U1', 'U2') == match


def test_list_swipes_order_filter_and_cursor(sql_repo):
    base = datetime(2025, 1, 1, 12, 0, 0)
    for offset, (target, direction) in enumerate([('U2', 'LIKE'), ('U3', 'PASS'), ('U4', 'LIKE')]):
        db.session.add(Swipe(
            swiper_id='U1',
            swiped_id=target,
            direction=direction,
            created_at=base + timedelta(minutes=offset),
        ))
    db.session.commit()

    assert [s.swiped_id for s in sql_repo.list_swipes('U1')] == ['U4', 'U3', 'U2']
    assert [s.swiped_id for s in sql_repo.list_swipes('U1', SwipeDirection.LIKE)] == ['U4', 'U2']
    assert [s.swiped_id for s in sql_repo.list_swipes('U1', limit=1)] == ['U4']
    assert [
        s.swiped_id for s in sql_repo.list_swipes('U1', before=SwipeCursor(base + timedelta(minutes=2)))
    ] == ['U3', 'U2']


def test_list_active_matches(sql_repo):
    base = datetime(2025, 1, 1, 12, 0, 0)
    db.session.add_all([
        Match(user_id_1='U1', user_id_2='U2', created_at=base),
        Match(user_id_1='U1', user_id_2='U3', created_at=base + timedelta(minutes=1), active=False),
        Match(user_id_1='U0', user_id_2='U1', created_at=base + timedelta(minutes=2)),
        Match(user_id_1='U4', user_id_2='U5', created_at=base + timedelta(minutes=3)),
    ])
    db.session.commit()

    matches = sql_repo.list_active_matches('U1')

    assert [m.user_ids for m in matches] == [('U0', 'U1'), ('U1', 'U2')]


def test_batch_against_the_database(sql_repo):
    profiles = SqlProfileResolver()

    submit_swipe_batch(sql_repo, profiles, 'U1', [{'swiped_on': 'U2', 'direction': 'RIGHT'}])
    result = submit_swipe_batch(sql_repo, profiles, 'U2', [
        {'swiped_on': 'U1', 'direction': 'RIGHT'},
        {'swiped_on': 'U1', 'direction': 'RIGHT'},
        {'swiped_on': 'U9', 'direction': 'LEFT'},
    ])

    assert len(result.created) == 1
    assert [m.user_ids for m in result.matches] == [('U1', 'U2')]
    assert [e['reason'] for e in result.errors] == ['DuplicateSwipe', 'InvalidTarget']
    assert Match.query.count() == 1


def test_tied_timestamps_page_without_gaps(sql_repo):
    stamp = datetime(2025, 1, 1, 12, 0, 0)
    for target in ('U2', 'U3', 'U4'):
        db.session.add(Swipe(swiper_id='U1', swiped_id=target, direction='LIKE', created_at=stamp))
    db.session.commit()

    first_page = sql_repo.list_swipes('U1', limit=2)
    cursor = SwipeCursor.from_dict(first_page[-1].to_dict())
    second_page = sql_repo.list_swipes('U1', limit=2, before=cursor)

    seen = [s.swiped_id for s in first_page + second_page]
    assert sorted(seen) == ['U2', 'U3', 'U4']
    assert len(second_page) == 1
    ids = [s.id for s in first_page + second_page]
    assert ids == sorted(ids, reverse=True)


def test_match_pair_must_be_in_canonical_order(sql_repo):
    with pytest.raises(ValueError):
        sql_repo.insert_match('U2', 'U1')
    assert Match.query.count() == 0


def test_check_violation_is_not_a_conflict(sql_repo):
    with pytest.raises(StorageError) as exc_info:
        sql_repo.insert_swipe('U1', 'U1', SwipeDirection.LIKE)

    assert not isinstance(exc_info.value, ConflictError)

    # Session was rolled back and is usable again
    sql_repo.insert_swipe('U1', 'U2', SwipeDirection.LIKE)
    assert Swipe.query.count() == 1


class _DriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


@pytest.mark.parametrize('orig, expected', [
    (_DriverError('insert or update violates foreign key', pgcode='23503'), True),
    (_DriverError('duplicate key value violates unique constraint', pgcode='23505'), False),
    (_DriverError('FOREIGN KEY constraint failed'), True),
    (_DriverError('UNIQUE constraint failed: swipes.swiper_id, swipes.swiped_id'), False),
])
def test_foreign_key_violation_detection(orig, expected):
    error = IntegrityError('INSERT INTO swipes ...', {}, orig)
    assert _is_foreign_key_violation(error) is expected


@pytest.mark.parametrize('orig, expected', [
    (_DriverError('duplicate key value violates unique constraint', pgcode='23505'), True),
    (_DriverError('new row violates check constraint', pgcode='23514'), False),
    (_DriverError('insert or update violates foreign key', pgcode='23503'), False),
    (_DriverError('UNIQUE constraint failed: matches.user_id_1, matches.user_id_2'), True),
    (_DriverError('CHECK constraint failed: ck_swipes_check_no_self_swipe'), False),
])
def test_unique_violation_detection(orig, expected):
    error = IntegrityError('INSERT INTO matches ...', {}, orig)
    assert _is_unique_violation(error) is expected


def test_profile_resolver_summary(sql_users):
    resolver = SqlProfileResolver()

    summary = resolver.summarize('U1')

    assert summary == {
        'id': 'U1',
        'name': 'User U1',
        'avatar_url': None,
        'age': 25,
        'gender': 'female',
        'bio': 'Bio of U1',
        'interests': ['Hiking', 'Coffee'],
        'photos': ['https://img.example.com/U1.jpg'],
        'has_location': True,
    }
    assert 'email' not in summary
    assert resolver.summarize('U2')['has_location'] is False
    assert resolver.summarize('ghost') is None
    assert resolver.exists('U3') and not resolver.exists('ghost')
    assert set(resolver.summarize_many(['U1', 'U2', 'ghost'])) == {'U1', 'U2'}
