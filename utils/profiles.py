from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from flask import current_app
from sqlalchemy.orm import selectinload

from models import db, User, Profile

EXTENSION_KEY = 'profile_resolver'


class ProfileResolver(ABC):
    """Read-only lookup of user identities and their public summaries"""

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        ...

    @abstractmethod
    def summarize(self, user_id: str) -> Optional[dict]:
        ...

    def summarize_many(self, user_ids: Iterable[str]) -> Dict[str, dict]:
        summaries = {}
        for user_id in set(user_ids):
            summary = self.summarize(user_id)
            if summary is not None:
                summaries[user_id] = summary
        return summaries


def build_user_summary(user: User, profile: Optional[Profile]) -> dict:
    """Public card for a user, without email or raw coordinates"""
    summary = user.to_dict()
    if profile is not None:
        summary.update(profile.to_dict())
        summary['has_location'] = profile.has_location
    else:
        summary.update({
            'age': None,
            'gender': None,
            'bio': None,
            'interests': [],
            'photos': [],
            'has_location': False,
        })
    summary['interests'] = summary.get('interests') or []
    summary['photos'] = summary.get('photos') or []
    return summary


class SqlProfileResolver(ProfileResolver):
    """Resolves users from the users/profiles tables"""

    def exists(self, user_id):
        return db.session.get(User, user_id) is not None

    def summarize(self, user_id):
        user = db.session.get(User, user_id)
        if not user:
            return None
        return build_user_summary(user, user.profile)

    def summarize_many(self, user_ids):
        ids = list(set(user_ids))
        if not ids:
            return {}
        users = (
            User.query
            .options(selectinload(User.profile))
            .filter(User.id.in_(ids))
            .all()
        )
        return {user.id: build_user_summary(user, user.profile) for user in users}


class StaticProfileResolver(ProfileResolver):
    """Resolver over a fixed mapping of user id to summary"""

    def __init__(self, summaries: Dict[str, dict]):
        self._summaries = dict(summaries)

    def exists(self, user_id):
        return user_id in self._summaries

    def summarize(self, user_id):
        summary = self._summaries.get(user_id)
        return dict(summary) if summary is not None else None


def get_profile_resolver() -> ProfileResolver:
    return current_app.extensions[EXTENSION_KEY]
