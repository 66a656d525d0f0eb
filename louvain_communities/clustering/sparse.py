"""
Reusable sparse containers for the local-moving phase.

Both structures are allocated once per run for the level-0 node count and
reused across nodes and levels: clearing costs O(number of used slots).
"""
from collections import deque

import numpy as np


class SparseMap:
    """
    Map from community id to accumulated weight over dense/sparse arrays.

    ``dense[:size]`` lists the keys in insertion order and ``vals[:size]``
    their values. ``sparse[key]`` points into the dense arrays and is only
    trusted when the dense slot points back to the key.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.size = 0
        self.dense = np.zeros(capacity, dtype=np.int64)
        self.sparse = np.zeros(capacity, dtype=np.int64)
        self.vals = np.zeros(capacity, dtype=np.float64)

    def __len__(self):
        return self.size

    def __contains__(self, key):
        position = self.sparse[key]
        return position < self.size and self.dense[position] == key

    def clear(self):
        self.size = 0

    def get(self, key, default=0.0):
        position = self.sparse[key]
        if position < self.size and self.dense[position] == key:
            return float(self.vals[position])
        return default

    def add(self, key, value):
        """Add ``value`` to the weight of ``key``, inserting it when absent."""
        position = self.sparse[key]
        if position < self.size and self.dense[position] == key:
            self.vals[position] += value
            return

        position = self.size
        self.sparse[key] = position
        self.dense[position] = key
        self.vals[position] = value
        self.size += 1

    def items(self):
        for position in range(self.size):
            yield int(self.dense[position]), float(self.vals[position])


class SparseQueueSet:
    """FIFO of node indices holding each index at most once."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.queue = deque()
        self.members = np.zeros(capacity, dtype=bool)

    def __len__(self):
        return len(self.queue)

    def __contains__(self, item):
        return bool(self.members[item])

    def enqueue(self, item):
        if self.members[item]:
            return
        self.members[item] = True
        self.queue.append(item)

    def dequeue(self):
        item = self.queue.popleft()
        self.members[item] = False
        return item

    def clear(self):
        while self.queue:
            self.members[self.queue.popleft()] = False
