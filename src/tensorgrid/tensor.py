"""Flat, row-major N-dimensional array of doubles.

:class:`Tensor` stores its elements in a single contiguous 1-D
``numpy`` buffer together with a list of per-axis sizes. The last index
varies fastest, so element ``(i0, i1, ..., i_{r-1})`` lives at

    i_{r-1} + size[r-1] * (i_{r-2} + size[r-2] * (... + size[1] * i0))

The rank-0 tensor is the empty tensor: no sizes and no data.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np


class TensorSanityError(RuntimeError):
    """Raised when a tensor fails an internal consistency check."""


def _check_sizes(rank: int, sizes: Sequence[int], where: str) -> List[int]:
    """Validate a size list and return it as a list of Python ints."""
    if rank < 0:
        raise ValueError(f"Rank must be non-negative, got {rank} in {where}.")
    if len(sizes) < rank:
        raise ValueError(
            f"Size list has length {len(sizes)} but rank is {rank} in {where}."
        )
    out = []
    for i in range(rank):
        n = int(sizes[i])
        if n <= 0:
            raise ValueError(
                f"Requested size {n} with non-zero rank for index {i} in {where}."
            )
        out.append(n)
    return out


class Tensor:
    """Tensor of doubles with arbitrary rank and row-major storage.

    Parameters
    ----------
    rank : int, optional
        Number of indices. Default is 0 (empty tensor).
    sizes : sequence of int, optional
        Size of each index; must contain ``rank`` positive entries.

    Raises
    ------
    ValueError
        If any requested size is zero or negative.

    Examples
    --------
    >>> t = Tensor(2, [2, 3])
    >>> t.set([1, 2], 4.0)
    >>> t.get([1, 2])
    4.0
    >>> t.pack_indices([1, 2])
    5
    """

    def __init__(self, rank: int = 0, sizes: Sequence[int] = ()):
        self.size: List[int] = _check_sizes(rank, sizes, f"{type(self).__name__}()")
        self.rk: int = rank
        self.data: np.ndarray = np.zeros(int(np.prod(self.size)) if rank > 0 else 0)

    # ------------------------------------------------------------------
    # Index packing
    # ------------------------------------------------------------------

    def pack_indices(self, index: Sequence[int]) -> int:
        """Return the position in the flat buffer of the element at *index*.

        Raises
        ------
        IndexError
            If *index* has the wrong length or any entry is out of range.
        """
        if self.rk == 0:
            raise IndexError("Cannot index an empty (rank 0) tensor.")
        if len(index) < self.rk:
            raise IndexError(
                f"Index list has length {len(index)} but rank is {self.rk}."
            )
        ix = 0
        for i in range(self.rk):
            j = int(index[i])
            if j < 0 or j >= self.size[i]:
                raise IndexError(
                    f"Value {j} of index {i} out of range [0, {self.size[i] - 1}]."
                )
            ix = ix * self.size[i] + j
        return ix

    def unpack_index(self, ix: int) -> List[int]:
        """Inverse of :meth:`pack_indices`."""
        index = [0] * self.rk
        for i in range(self.rk - 1, -1, -1):
            ix, index[i] = divmod(ix, self.size[i])
        return index

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def get(self, index: Sequence[int]) -> float:
        """Return the element at *index*."""
        return float(self.data[self.pack_indices(index)])

    def set(self, index: Sequence[int], val: float) -> None:
        """Set the element at *index* to *val*."""
        self.data[self.pack_indices(index)] = val

    def set_all(self, val: float) -> None:
        self.data[:] = val

    def get_rank(self) -> int:
        return self.rk

    def get_size(self, i: int) -> int:
        if i < 0 or i >= self.rk:
            raise IndexError(
                f"Index {i} greater than or equal to rank {self.rk} in get_size()."
            )
        return self.size[i]

    def get_size_arr(self) -> List[int]:
        return list(self.size)

    def total_size(self) -> int:
        return len(self.data)

    def get_data(self) -> np.ndarray:
        """Return the flat data buffer (not a copy)."""
        return self.data

    def swap_data(self, data: np.ndarray) -> None:
        """Replace the data buffer with *data*, which must have the same length."""
        data = np.asarray(data, dtype=float).ravel()
        if len(data) != len(self.data):
            raise ValueError(
                f"New data has length {len(data)} but tensor holds "
                f"{len(self.data)} elements."
            )
        self.data = data

    def to_array(self) -> np.ndarray:
        """Return the data as an N-d array view of shape ``tuple(size)``."""
        return self.data.reshape(tuple(self.size))

    def min_value(self) -> float:
        return float(np.min(self.data))

    def max_value(self) -> float:
        return float(np.max(self.data))

    def total_sum(self) -> float:
        return float(np.sum(self.data))

    # ------------------------------------------------------------------
    # Resizing
    # ------------------------------------------------------------------

    def resize(self, rank: int, sizes: Sequence[int] = ()) -> None:
        """Resize the tensor, discarding all data.

        The sizes are validated before anything is changed, so a failed
        resize leaves the tensor untouched.
        """
        new_size = _check_sizes(rank, sizes, f"{type(self).__name__}.resize()")
        self.rk = rank
        self.size = new_size
        self.data = np.zeros(int(np.prod(new_size)) if rank > 0 else 0)

    def clear(self) -> None:
        """Reset to the empty rank-0 tensor."""
        self.rk = 0
        self.size = []
        self.data = np.zeros(0)

    def is_valid(self) -> None:
        """Check that the data buffer matches the declared sizes."""
        if len(self.size) != self.rk:
            raise TensorSanityError(
                f"Rank is {self.rk} but size list has length {len(self.size)} "
                f"in {type(self).__name__}.is_valid()."
            )
        expected = int(np.prod(self.size)) if self.rk > 0 else 0
        if len(self.data) != expected:
            raise TensorSanityError(
                f"Data has length {len(self.data)} but sizes {self.size} "
                f"imply {expected} in {type(self).__name__}.is_valid()."
            )
