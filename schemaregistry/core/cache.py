"""
SubjectCache: the in-memory index of registered schema versions.

Two maps share the Subject records:

    by_subject_version: subject name -> version -> Subject
    by_id:              schema id    -> Subject

plus the decode callback on file for each subject name, which background
sync reuses for versions it discovers. Every read takes the shared side of
a ReadWriteLock and every write the exclusive side. Callers must never
perform network I/O through this class; fetch first, then insert.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from schemaregistry.core.rwlock import ReadWriteLock
from schemaregistry.formats.base import UnmarshalerFunc
from schemaregistry.models.subject import Subject


class SubjectCache:
    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._by_subject_version: Dict[str, Dict[int, Subject]] = {}
        self._by_id: Dict[int, Subject] = {}
        self._unmarshalers: Dict[str, UnmarshalerFunc] = {}

    def insert(self, subject: Subject, *, bind_unmarshaler: bool = False) -> Optional[Subject]:
        """
        Insert `subject`, replacing any entry with the same (name, version).

        Args:
            subject: The record to store.
            bind_unmarshaler: Also make the subject's callback the one on file
                for its name (explicit registrations do this).

        Returns:
            The Subject previously stored under the same key, if any.

        Raises:
            ValueError: `subject.version` is LATEST or ALL.
        """
        if subject.version.is_selector:
            raise ValueError(f"version selector {subject.version} cannot be cached")

        with self._lock.write_locked():
            versions = self._by_subject_version.setdefault(subject.name, {})
            previous = versions.get(int(subject.version))
            versions[int(subject.version)] = subject
            if (
                previous is not None
                and previous.id != subject.id
                and self._by_id.get(previous.id) is previous
            ):
                del self._by_id[previous.id]
            self._by_id[subject.id] = subject
            if bind_unmarshaler and subject.unmarshaler_func is not None:
                self._unmarshalers[subject.name] = subject.unmarshaler_func
        return previous

    def lookup_by_version(self, name: str, version: int) -> Optional[Subject]:
        with self._lock.read_locked():
            return self._by_subject_version.get(name, {}).get(int(version))

    def lookup_by_id(self, schema_id: int) -> Optional[Subject]:
        with self._lock.read_locked():
            return self._by_id.get(schema_id)

    def lookup_latest(self, name: str) -> Optional[Subject]:
        """
        Highest version currently cached for `name`.

        This trails the registry until background sync catches up.
        """
        with self._lock.read_locked():
            versions = self._by_subject_version.get(name)
            if not versions:
                return None
            return versions[max(versions)]

    def previous_version(self, name: str, version: int) -> Optional[Subject]:
        """Nearest cached version of `name` strictly below `version`."""
        with self._lock.read_locked():
            lower = [v for v in self._by_subject_version.get(name, {}) if v < version]
            if not lower:
                return None
            return self._by_subject_version[name][max(lower)]

    def has_version(self, name: str, version: int) -> bool:
        with self._lock.read_locked():
            return int(version) in self._by_subject_version.get(name, {})

    def is_registered(self, name: str) -> bool:
        with self._lock.read_locked():
            return name in self._by_subject_version

    def unmarshaler_for(self, name: str) -> Optional[UnmarshalerFunc]:
        with self._lock.read_locked():
            return self._unmarshalers.get(name)

    def versions(self, name: str) -> List[int]:
        with self._lock.read_locked():
            return sorted(self._by_subject_version.get(name, {}))

    def subject_names(self) -> List[str]:
        with self._lock.read_locked():
            return sorted(self._by_subject_version)

    def subjects(self) -> List[Subject]:
        """Snapshot of every cached Subject, ordered by name then version."""
        with self._lock.read_locked():
            return [
                versions[v]
                for name in sorted(self._by_subject_version)
                for versions in (self._by_subject_version[name],)
                for v in sorted(versions)
            ]

    def __len__(self) -> int:
        with self._lock.read_locked():
            return sum(len(v) for v in self._by_subject_version.values())
