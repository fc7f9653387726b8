# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Process-local cache for secrets and temporary credentials.
A single instance is passed into each commercial bridge client, so two
clients with different credentials can live side by side.
"""

from datetime import datetime, timedelta, timezone

DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


def _as_aware(moment):
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class Cache:
    def __init__(self, refresh_margin=DEFAULT_REFRESH_MARGIN, clock=None):
        self._stash = {}
        self._expirations = {}
        self.refresh_margin = refresh_margin
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def exists(self, key):
        return key in self._stash

    def get(self, key):
        """
        Returns the cached value, or None if nothing is cached for key or
        the value expires within the refresh margin.
        """
        if not self.exists(key):
            return None
        expiration = self._expirations.get(key)
        if expiration is not None and (
            expiration - _as_aware(self._clock()) <= self.refresh_margin
        ):
            return None
        return self._stash[key]

    def add(self, key, value, expiration=None):
        """
        Stores the value. Without an expiration it is kept for the lifetime
        of the process.
        """
        self._stash[key] = value
        if expiration is None:
            self._expirations.pop(key, None)
        else:
            self._expirations[key] = _as_aware(expiration)

    def remove(self, key):
        if not self.exists(key):
            return
        del self._stash[key]
        self._expirations.pop(key, None)
