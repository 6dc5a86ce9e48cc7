#
#  Chained hash map that remembers insertion order
#

import copy
import enum


class Ownership(enum.Enum):
    """How a map treats the values handed to it"""
    COPY = 'copy'       # store a deep copy, release displaced values
    MOVE = 'move'       # take the value itself, release displaced values
    BORROW = 'borrow'   # caller keeps ownership, nothing is released


def _default_release(value):
    close = getattr(value, 'close', None)
    if callable(close):
        close()


class _Entry(object):
    __slots__ = ('key', 'value')

    def __init__(self, key, value):
        self.key = key
        self.value = value


class OrderedMap(object):
    """String keyed map with deterministic (insertion) iteration order.

    Lookups go through a fixed table of hash chains; the order list is
    only used for iteration.  Overwriting an existing key keeps its
    original position.
    """

    TABLE_SIZE = 101

    def __init__(self, policy=Ownership.COPY, release=None):
        self.policy = policy
        self.release = release or _default_release
        self._table = [[] for _ in range(self.TABLE_SIZE)]
        self._order = []

    @classmethod
    def index(cls, key):
        value = 0
        for char in key:
            value = (value * 31 + ord(char)) & 0xFFFFFFFF
        return value % cls.TABLE_SIZE

    def _find(self, key):
        for entry in self._table[self.index(key)]:
            if entry.key == key:
                return entry
        return None

    def _store(self, value):
        if self.policy is Ownership.COPY:
            return copy.deepcopy(value)
        return value

    def _drop(self, value):
        if self.policy is not Ownership.BORROW and value is not None:
            self.release(value)

    def set(self, key, value):
        """Remember 'value' under 'key' and return the stored object"""
        if key is None:
            raise KeyError('map keys cannot be None')
        stored = self._store(value)
        entry = self._find(key)
        if entry is None:
            entry = _Entry(key, stored)
            self._table[self.index(key)].append(entry)
            self._order.append(entry)
        else:
            if entry.value is not stored:
                self._drop(entry.value)
            entry.value = stored
        return stored

    def get(self, key, default=None):
        entry = self._find(key)
        return default if entry is None else entry.value

    def exists(self, key):
        return self._find(key) is not None

    def remove(self, key):
        entry = self._find(key)
        if entry is None:
            return False
        self._table[self.index(key)].remove(entry)
        self._order.remove(entry)
        self._drop(entry.value)
        return True

    def clear(self):
        for entry in self._order:
            self._drop(entry.value)
        self._table = [[] for _ in range(self.TABLE_SIZE)]
        self._order = []

    def keys(self):
        return [e.key for e in self._order]

    def values(self):
        return [e.value for e in self._order]

    def items(self):
        return [(e.key, e.value) for e in self._order]

    def __len__(self):
        return len(self._order)

    def __iter__(self):
        return iter(self.keys())

    def __contains__(self, key):
        return self.exists(key)

    def __getitem__(self, key):
        entry = self._find(key)
        if entry is None:
            raise KeyError(key)
        return entry.value

    def __setitem__(self, key, value):
        self.set(key, value)

    def __delitem__(self, key):
        if not self.remove(key):
            raise KeyError(key)
