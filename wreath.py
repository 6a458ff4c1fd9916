from typing import Self
from abc import ABCMeta, abstractmethod
from typing import Optional, ClassVar, Callable, Iterator, Iterable, Any, Type, TypeVar, cast
import functools
import itertools
import logging
import math
import re

T = TypeVar('T')

logger = logging.getLogger(__name__)

def circular_pairwise(x: Iterable[T]) -> Iterator[tuple[T, T]]:
	''' like pairwise, but with a trailing (last, first) entry '''
	x = iter(x)
	start = next(x)
	e1 = start
	for e2 in x:
		yield (e1, e2)
		e1 = e2
	yield (e1, start)

class classproperty(property):
	def __get__(self, owner_self, owner_cls):
		return cast(Any, self.fget)(owner_cls)

__all__ = [
	'AlgebraError', 'MalformedCycleError', 'InvalidPointError',
	'RingZeroDivisionError', 'MatrixInvariantError',
	'GroupMeta', 'Group', 'ID',
	'Ring3',
	'Permutation',
	'WreathElement', 'Matrix',
	'encode', 'compose', 'decode', 'format_matrix',
	'wreath_group',
]


# ERRORS
# ------

class AlgebraError(Exception):
	''' base class for the errors raised by this module '''

class MalformedCycleError(AlgebraError, ValueError):
	''' a generating cycle is empty or repeats a point '''

class InvalidPointError(AlgebraError, ValueError):
	''' a point index is not a positive integer, or is out of the point set '''

class RingZeroDivisionError(AlgebraError, ZeroDivisionError):
	''' the additive identity of a ring was inverted or divided by '''

class MatrixInvariantError(AlgebraError, ValueError):
	'''
	a matrix is not a generalized permutation matrix (exactly one present
	cell per row and column), or two matrices don't have matching sizes
	'''


# GROUP
# -----

ID = object()
'''
placeholder object that is expanded to the identity element in contexts that
accept short syntax, like the arguments of `WreathElement`.

see `Group.short_value()`.
'''

class GroupMeta(ABCMeta):
	''' Metaclass for Group.

	gives group classes their class-level syntax:
	 - `Class.ID` and `Class.ORDER`
	 - `Class[index]` and `iter(Class)` for the bijection with the naturals
	'''

	@property
	def ID(self: Type[T]) -> T:
		''' the group's identity element '''
		cls = cast(Type['Group'], self)
		return cls._id()

	@property
	def ORDER(cls) -> int:
		''' amount of elements of the group; raises ValueError if it's infinite '''
		return cls._order()

	def __getitem__(self: Type[T], index: int) -> T:
		cls = cast(Type['Group'], self)
		order = None
		try:
			order = cls.ORDER
		except ValueError:
			pass

		if not isinstance(index, int):
			raise TypeError(f'element indices must be integers, not {type(index)}')
		if not (index >= 0 and (order is None or index < order)):
			raise IndexError(f'element index {index} out of range')
		return cls._fromindex(index)

	def __iter__(self: Type[T]) -> Iterator[T]:
		cls = cast(Type['Group'], self)
		try:
			indices = range(cls.ORDER)
		except ValueError:
			indices = itertools.count()
		return map(cls._fromindex, indices)

class Group(metaclass=GroupMeta):
	'''
	Base class for the groups of this module.

	Elements are immutable and hashable. A subclass provides the identity,
	the operation and the inverse, plus a bijection with the naturals; in
	exchange it gets the `*` and `**` operators, conjugation, commutators,
	and comparison / hashing (which go through the bijection by default).
	'''

	def __init_subclass__(cls, final=True, **kwargs) -> None:
		super().__init_subclass__(**kwargs)

	# constructing / formatting

	@classmethod
	def short_value(cls, x: Any) -> Self:
		'''
		coerces short value `x` into an element of this group:
		 - instances of the group are returned unchanged.
		 - the special `ID` export becomes the identity.
		 - anything else is fed to the constructor.
		'''
		if isinstance(x, cls):
			return x
		if x is ID:
			return cls.ID
		return cls(x)

	def __str__(self):
		return self.short_repr()

	def __repr__(self):
		'''
		returns `Class(<value repr>)`, or `Class.ID` if `value_repr()` returned
		the `ID` singleton. falls back to `Class[<index>]`.
		'''
		name = type(self).__name__
		try:
			desc = self.value_repr()
		except NotImplementedError:
			pass
		else:
			return name + ('.ID' if desc is ID else f'({desc})')
		return name + f'[{int(self)}]'

	def short_repr(self) -> str:
		''' expresses this element in the short syntax understood by `short_value` '''
		try:
			desc = self.value_repr()
		except NotImplementedError:
			pass
		else:
			return 'ID' if desc is ID else desc
		return repr(self)

	def value_repr(self) -> str:
		'''
		returns the arguments to pass to the constructor to get this element
		back, or the `ID` singleton for the identity.
		'''
		raise NotImplementedError('this group does not support short value representations')

	# core group operations

	@classmethod
	@abstractmethod
	def _id(cls) -> Self:
		''' the group's identity element

		internal method; users should use `Class.ID` '''

	@abstractmethod
	def _mul(self, other: Self) -> Self:
		''' the group operation

		internal method; users should use the `*` operator, which
		validates the type of the other object. '''

	@property
	@abstractmethod
	def inv(self) -> Self:
		''' inverse element. equivalent to the notation `x ** -1` '''

	# bijection with the naturals. it is not specified which one, but
	# it must never change and the three methods must agree with each other.

	@classmethod
	@abstractmethod
	def _order(cls) -> int:
		''' order of the group, or raise ValueError if the group is infinite

		internal method; users should use `Class.ORDER` '''

	@classmethod
	@abstractmethod
	def _fromindex(cls, x: int) -> Self:
		''' the element corresponding to natural `x`

		internal method; users should use `Class[x]` '''

	@abstractmethod
	def _index(self) -> int:
		''' the natural corresponding to this element

		internal method; users should use `int(x)` '''

	# comparison / hashing

	def _cmpkey(self):
		'''
		comparison key, to which equality and hashing delegate. defaults to
		the index, which must stay consistent with any override.
		'''
		return self._index()

	def __hash__(self):
		return hash(self._cmpkey())

	def __eq__(self, other: object):
		if not isinstance(other, type(self)):
			return NotImplemented
		return self._cmpkey() == type(self)._cmpkey(other)

	# optional auxiliary operations

	def order(self) -> int:
		'''
		order of this element (lowest non-zero natural `x` satisfying
		`self ** x == ID`). groups may leave it unimplemented.
		'''
		raise NotImplementedError('this group has no efficient way to calculate the order of an element')

	def _pow(self, x: int, order_threshold: Optional[int]=4) -> Self:
		'''
		raises an element to an integer power (may be negative), by squaring.
		exponents beyond `order_threshold` are first reduced modulo the element's
		order, when it can be calculated.

		internal method; users should use `self ** x`.
		'''
		if order_threshold and abs(x) > order_threshold:
			try:
				order = self.order()
			except (NotImplementedError, ValueError):
				pass
			else:
				if abs(x) >= order:
					x = x % order
		if x < 0:
			self = self.inv
			x = -x
		result = type(self).ID
		mult = self
		while True:
			if x & 1: result *= mult
			x >>= 1
			if not x: break
			mult *= mult
		return result

	# operations provided by the implementation

	def __bool__(self):
		return self != type(self).ID

	def __mul__(self, other: Self) -> Self:
		if isinstance(other, type(self)):
			return self._mul(other)
		return NotImplemented

	def __pow__(self, other: int) -> Self:
		if not isinstance(other, int):
			return NotImplemented
		if other == -1:
			return self.inv
		return self._pow(other)

	def conj(self, other: Self) -> Self:
		''' (left) conjugate an element using this element: `self.inv * other * self` '''
		return self.inv * other * self

	def conj_by(self, other: Self) -> Self:
		''' (left) conjugate this element by `other`: `other.inv * self * other` '''
		return type(self).conj(other, self)

	def comm(self, other: Self) -> Self:
		''' commutator: `self.inv * other.inv * self * other` '''
		return self.inv * other.inv * self * other

	def __int__(self) -> int:
		return self._index()


# RING OF ORDER 3
# ---------------

class Ring3:
	'''
	the ring of integers modulo 3 (a field), used for the twist labels of
	wreath elements.

	its elements are ZERO (additive identity), ONE (multiplicative identity)
	and TWO. they render multiplicatively, as the cube roots of unity
	`1`, `w` and `w^2`, padded to three characters.
	'''

	SIZE: ClassVar[int] = 3

	SYMBOLS: ClassVar[tuple[str, ...]] = ('1  ', 'w  ', 'w^2')

	_value: int

	@property
	def value(self) -> int:
		return self._value

	def __init__(self, value: int):
		assert isinstance(value, int), f'object {repr(value)} is not an int'
		self._value = value % self.SIZE

	@classmethod
	def short_value(cls, x: Any) -> Self:
		if isinstance(x, cls):
			return x
		if x is ID:
			return cls.ZERO
		return cls(x)

	@classmethod
	def from_str(cls, s: str, radix: int = 10) -> Self:
		''' parses an integer literal in base `radix`, reducing it modulo 3 '''
		return cls(int(s, radix))

	@classproperty
	def ZERO(cls) -> 'Ring3':
		return cls(0)

	@classproperty
	def ONE(cls) -> 'Ring3':
		return cls(1)

	@classproperty
	def TWO(cls) -> 'Ring3':
		return cls(2)

	# conversion / formatting

	def __int__(self) -> int:
		return self.value

	def __bool__(self) -> bool:
		return self.value != 0

	def __hash__(self):
		return hash(self.value)

	def __eq__(self, other: object):
		if not isinstance(other, Ring3):
			return NotImplemented
		return self.value == other.value

	def __repr__(self):
		return f'{type(self).__name__}({self.value})'

	def __str__(self):
		return self.SYMBOLS[self.value]

	# ring operations

	def add_inv(self) -> Self:
		return type(self)(-self.value)

	def mul_inv(self) -> Self:
		if not self:
			raise RingZeroDivisionError('0 has no multiplicative inverse')
		# 1 * 1 = 2 * 2 = 1
		return self

	def __neg__(self) -> Self:
		return self.add_inv()

	def __add__(self, other: Self) -> Self:
		if not isinstance(other, Ring3):
			return NotImplemented
		return type(self)(self.value + other.value)

	def __sub__(self, other: Self) -> Self:
		if not isinstance(other, Ring3):
			return NotImplemented
		return type(self)(self.value - other.value)

	def __mul__(self, other: Self) -> Self:
		if not isinstance(other, Ring3):
			return NotImplemented
		return type(self)(self.value * other.value)

	def __truediv__(self, other: Self) -> Self:
		if not isinstance(other, Ring3):
			return NotImplemented
		if not other:
			raise RingZeroDivisionError('division by 0')
		return self * other.mul_inv()

	def __mod__(self, other: Self) -> Self:
		raise NotImplementedError('remainder is not defined over Ring3')

	def __pow__(self, x: int) -> Self:
		if not isinstance(x, int):
			return NotImplemented
		if x < 0:
			return self.mul_inv() ** -x
		return type(self)(self.value ** x)


# PERMUTATION
# -----------

class Permutation(Group):
	'''
	finitary permutation of the points 1, 2, 3, ..., built from generating cycles

	a permutation remembers the cycles it was constructed from (`cycles`),
	which are used for display and by `concatenate()`. `k` is the largest
	point mentioned by them, and every point beyond it is fixed. everything
	else (equality, hashing, the group structure) only looks at the action
	on points, so `Permutation([[1, 2]]) == Permutation([[1, 2], [5]])`.

	a list of cycles is read right to left, like a product in usual notation:
	the last cycle is applied first. likewise `a * b` is the composition
	`a ∘ b` of their associated functions (b is performed first, then a).

	the implemented bijection writes each permutation as a product of
	transpositions `(n a_n) ... (3 a_3) (2 a_2)` with `a_i <= i`, and reads
	the digits `i - a_i` in the factorial number system. ID maps to 0, and
	the permutations of {1..n} take the first n! indices.
	'''

	_cycles: tuple[tuple[int, ...], ...]
	_tables: list[dict[int, int]]
	_k: int

	def __init__(self, cycles: Iterable[Iterable[int]] = ()):
		cycles = tuple(tuple(c) for c in cycles)
		for cycle in cycles:
			if not cycle:
				raise MalformedCycleError('generating cycles must not be empty')
			for point in cycle:
				assert isinstance(point, int), f'object {repr(point)} is not an int'
				if point < 1:
					raise InvalidPointError(f'point {point} is not valid, points start at 1')
			if len(set(cycle)) != len(cycle):
				raise MalformedCycleError(f'cycle {list(cycle)} repeats a point')

		self._cycles = cycles
		self._k = max((max(c) for c in cycles), default=0)
		self._tables = [ dict(circular_pairwise(c)) for c in reversed(cycles) ]

	@property
	def cycles(self) -> tuple[tuple[int, ...], ...]:
		''' generating cycles, as supplied to the constructor '''
		return self._cycles

	@property
	def k(self) -> int:
		''' largest point referenced by the generating cycles (0 for no cycles) '''
		return self._k

	# parsing / formatting

	def value_repr(self):
		if not self._cycles:
			return ID
		return repr([ list(c) for c in self._cycles ])

	def __str__(self):
		if self._k == 0:
			return 'e'
		return ''.join( '(' + ' '.join(map(str, c)) + ')' for c in self._cycles )

	# action on points

	def image(self, i: int) -> int:
		''' the point that `i` is sent to '''
		assert isinstance(i, int), f'object {repr(i)} is not an int'
		if i < 1:
			raise InvalidPointError(f'point {i} is not valid, points start at 1')
		if i > self._k:
			return i
		for table in self._tables:
			i = table.get(i, i)
		return i

	def __call__(self, i: int) -> int:
		''' interprets this permutation as a function on the points '''
		return self.image(i)

	def reverse_lookup(self, value: int) -> Optional[int]:
		''' the point within 1..k that is sent to `value`, or None if there's none '''
		assert isinstance(value, int), f'object {repr(value)} is not an int'
		if value < 1:
			raise InvalidPointError(f'point {value} is not valid, points start at 1')
		for i in range(1, self._k + 1):
			if self.image(i) == value:
				return i
		return None

	def largest_nontrivial_point(self) -> Optional[int]:
		''' the largest point not fixed by this permutation, or None for the identity '''
		for i in range(self._k, 0, -1):
			if self.image(i) != i:
				return i
		return None

	def image_table(self, size: Optional[int] = None) -> list[int]:
		''' images of the points 1..size (defaults to `k`), see `from_image_table()` '''
		size = self._k if size is None else size
		assert size >= (self.largest_nontrivial_point() or 0), f'size {size} does not cover the moved points'
		return [ self.image(i) for i in range(1, size + 1) ]

	# cycle composition / decomposition

	@staticmethod
	def _orbits(f: Callable[[int], int], bound: int) -> Iterator[list[int]]:
		''' follows the orbits of `f` over the points 1..bound, yielding the nontrivial ones '''
		seen = 0
		for start in range(1, bound + 1):
			if seen >> start & 1:
				continue
			cursor, cycle = start, []
			while True:
				cycle.append(cursor)
				seen |= 1 << cursor
				cursor = f(cursor)
				if cursor == start: break
			if len(cycle) > 1:
				yield cycle

	def canonical_form(self) -> Self:
		'''
		rebuilds the disjoint cycle decomposition from the action alone,
		ignoring the generating cycles. each cycle begins with its minimal
		element and cycles are sorted by it; fixed points are left out.
		'''
		bound = self.largest_nontrivial_point()
		if bound is None:
			return type(self).ID
		return type(self)(self._orbits(self.image, bound))

	@classmethod
	def from_image_table(cls, table: Iterable[int]) -> Self:
		'''
		constructs a permutation (in canonical form) from its images:
		`table[i - 1]` is the point that `i` is sent to.
		'''
		table = list(table)
		if sorted(table) != list(range(1, len(table) + 1)):
			raise ValueError(f'{table} is not a permutation of 1..{len(table)}')
		return cls(cls._orbits(lambda i: table[i - 1], len(table)))

	def concatenate(self, other: Self) -> Self:
		'''
		joins the generating cycles of both permutations into a new one
		(`self`'s first). this is a structural operation: for disjoint
		cycles it's the same as `self * other`.
		'''
		assert isinstance(other, Permutation), f'object {repr(other)} is not a Permutation'
		return type(self)(self._cycles + other._cycles)

	# core group operations

	@classmethod
	def _id(cls):
		return cls()

	def _mul(self, other: Self) -> Self:
		bound = max(self._k, other._k)
		return type(self).from_image_table( self.image(other.image(i)) for i in range(1, bound + 1) )

	@property
	def inv(self) -> Self:
		return type(self)( c[::-1] for c in reversed(self._cycles) )

	def _pow(self, x: int, order_threshold: Optional[int]=None) -> Self:
		bound = self.largest_nontrivial_point() or 0
		table = list(range(1, bound + 1))
		for cycle in self._orbits(self.image, bound):
			for i, point in enumerate(cycle):
				table[point - 1] = cycle[(i + x) % len(cycle)]
		return type(self).from_image_table(table)

	# derived properties

	def order(self) -> int:
		bound = self.largest_nontrivial_point() or 0
		return math.lcm(*map(len, self._orbits(self.image, bound)))

	def sign(self) -> int:
		''' returns the sign (0 → even, 1 → odd) of this permutation '''
		bound = self.largest_nontrivial_point() or 0
		return sum(len(c) - 1 for c in self._orbits(self.image, bound)) % 2

	# bijection

	@classmethod
	def _order(cls):
		raise ValueError('the group of finitary permutations is infinite')

	def _index(self) -> int:
		bound = self.largest_nontrivial_point() or 0
		value = [0] + self.image_table(bound)
		where = [0] * (bound + 1)
		for i in range(1, bound + 1):
			where[value[i]] = i
		index = 0
		for i in range(bound, 1, -1):
			a = value[i]
			index += (i - a) * math.factorial(i - 1)
			# peel off (i a) from the left, leaving a permutation that fixes i
			j = where[i]
			value[j], where[a] = a, j
			value[i], where[i] = i, i
		return index

	@classmethod
	def _fromindex(cls, index: int):
		value, where = [0, 1], [0, 1]
		i = 1
		while index:
			i += 1
			index, digit = divmod(index, i)
			value.append(i)
			where.append(i)
			# compose (i a) on the left: swap the positions holding i and a
			a = i - digit
			x, y = where[i], where[a]
			value[x], value[y] = a, i
			where[i], where[a] = y, x
		return cls.from_image_table(value[1:])


# WREATH PRODUCT
# --------------

Matrix = list[list[Optional[Ring3]]]
''' generalized permutation matrix: square, one present cell per row and column '''

class WreathElement(Group, final=False):
	'''
	element of the wreath product Z_3 ≀ S_n, as a (permutation, labels) pair

	`SIZE` is the amount of base points (must be defined by child, or use the
	automatic `W<n>` classes of this module). the permutation only moves
	points within 1..SIZE, and every base point carries a Ring3 label, fixed
	points included.

	labels refer to the arrangement *before* the permutation, so the product is

		(p, v) * (q, w) = (p ∘ q, v + w ∘ p⁻¹)

	which is the law implemented by the matrix `compose()`: the matrix of
	`a * b` is `compose(encode(b), encode(a))`.

	the implemented bijection is `labels * SIZE! + int(perm)`, with the labels
	read as a big-endian base 3 number.
	'''

	SIZE: ClassVar[int]
	''' size of the point set (must be defined by child) '''

	def __init_subclass__(cls, final=True, **kwargs):
		super().__init_subclass__(final, **kwargs)
		if final:
			SIZE = getattr(cls, 'SIZE', None)
			assert isinstance(SIZE, int) and SIZE > 0, f'{cls.__name__}.SIZE must be a positive int'

	# class definition

	_perm: Permutation
	_labels: tuple[Ring3, ...]

	@property
	def perm(self) -> Permutation:
		return self._perm

	@property
	def labels(self) -> tuple[Ring3, ...]:
		return self._labels

	@property
	def value(self) -> tuple[Permutation, tuple[Ring3, ...]]:
		return self._perm, self._labels

	def __init__(self, perm: Any = ID, labels: Any = ID):
		'''
		construct an element from a permutation and one label per base point.

		short syntax is accepted for both (see `Group.short_value()`): the
		permutation may be a list of cycles and the labels may be ints.
		'''
		SIZE = type(self).SIZE
		perm = Permutation.short_value(perm)
		if (perm.largest_nontrivial_point() or 0) > SIZE:
			raise InvalidPointError(f'{perm} moves points beyond {SIZE}')
		if labels is ID:
			labels = (Ring3.ZERO,) * SIZE
		labels = tuple(map(Ring3.short_value, labels))
		if len(labels) != SIZE:
			raise ValueError(f'expected {SIZE} labels, got {len(labels)}')
		self._perm = perm
		self._labels = labels

	def _origin(self, i: int) -> int:
		''' the base point that the permutation sends to `i` '''
		return self._perm.reverse_lookup(i) or i

	# formatting

	def value_repr(self):
		if not self:
			return ID
		return f'{self._perm.short_repr()}, {[ int(x) for x in self._labels ]}'

	def __str__(self):
		return f'{self._perm} [' + ', '.join(str(int(x)) for x in self._labels) + ']'

	# core group operations

	@classmethod
	def _id(cls):
		return cls()

	def _mul(self, other: Self) -> Self:
		SIZE = type(self).SIZE
		moved = ( other._labels[self._origin(i) - 1] for i in range(1, SIZE + 1) )
		labels = tuple( a + b for a, b in zip(self._labels, moved) )
		return type(self)(self._perm * other._perm, labels)

	@property
	def inv(self) -> Self:
		SIZE = type(self).SIZE
		labels = tuple( -self._labels[self._perm(i) - 1] for i in range(1, SIZE + 1) )
		return type(self)(self._perm.inv, labels)

	def order(self) -> int:
		perm_order = self._perm.order()
		quot = Group._pow(self, perm_order, order_threshold=None)
		assert not quot.perm
		return perm_order * (Ring3.SIZE if any(quot.labels) else 1)

	# bijection

	@classmethod
	def _order(cls):
		return Ring3.SIZE ** cls.SIZE * math.factorial(cls.SIZE)

	def _index(self) -> int:
		labels = functools.reduce(lambda acc, x: acc * Ring3.SIZE + int(x), self._labels, 0)
		return labels * math.factorial(type(self).SIZE) + int(self._perm)

	@classmethod
	def _fromindex(cls, index: int):
		index, perm = divmod(index, math.factorial(cls.SIZE))
		labels = []
		for _ in range(cls.SIZE):
			index, x = divmod(index, Ring3.SIZE)
			labels.append(x)
		return cls(Permutation[perm], labels[::-1])

	# matrix representation

	def encode(self) -> Matrix:
		'''
		the generalized permutation matrix of this element: row `i - 1` holds
		the label of base point `i`, in the column of the point sent to `i`.
		'''
		SIZE = type(self).SIZE
		m: Matrix = [ [None] * SIZE for _ in range(SIZE) ]
		for i in range(1, SIZE + 1):
			m[i - 1][self._origin(i) - 1] = self._labels[i - 1]
		return m

	@classmethod
	def decode(cls, m: Matrix) -> Self:
		''' reconstructs an element (with canonical permutation) from its matrix '''
		entries = _entries(m)
		if len(entries) != cls.SIZE:
			raise MatrixInvariantError(f'{cls.__name__} expects a {cls.SIZE}x{cls.SIZE} matrix, got {len(entries)}x{len(entries)}')
		table = [0] * cls.SIZE
		for row, (column, _) in enumerate(entries):
			table[column] = row + 1
		return cls(Permutation.from_image_table(table), [ x for _, x in entries ])

	def invert_small_order(self) -> Self:
		'''
		inverse calculated as the cube of this element, through two matrix
		compositions. this is only right when the order of the element divides
		4, e.g. a single 4-cycle whose labels add up to 0 (with no labels
		outside of it). see `inv` for the general inverse.
		'''
		order = self.order()
		if 4 % order:
			logger.warning('%r has order %d, which does not divide 4: its cube is not its inverse', self, order)
		m = self.encode()
		return type(self).decode(compose(compose(m, m), m))


# MATRIX OPERATIONS
# -----------------

def _entries(m: Matrix) -> list[tuple[int, Ring3]]:
	''' validates a generalized permutation matrix, returning the (column, value) of each row '''
	size = len(m)
	entries: list[tuple[int, Ring3]] = []
	columns: set[int] = set()
	for i, row in enumerate(m):
		if len(row) != size:
			raise MatrixInvariantError(f'row {i} has {len(row)} cells, expected {size}')
		present = [ (j, x) for j, x in enumerate(row) if x is not None ]
		if len(present) != 1:
			raise MatrixInvariantError(f'row {i} has {len(present)} present cells, expected 1')
		j, x = present[0]
		assert isinstance(x, Ring3), f'object {repr(x)} is not a Ring3'
		if j in columns:
			raise MatrixInvariantError(f'column {j} has more than one present cell')
		columns.add(j)
		entries.append((j, x))
	return entries

def encode(element: WreathElement) -> Matrix:
	''' the generalized permutation matrix of `element`, see `WreathElement.encode()` '''
	return element.encode()

def compose(now: Matrix, other: Matrix) -> Matrix:
	'''
	multiplies two element matrices: every row is chased through `other` and
	then through `now`, adding up the two labels found along the way.

	the result is the matrix of `decode(other) * decode(now)`, that is, the
	permutation of `now` is applied first.
	'''
	if len(now) != len(other):
		raise MatrixInvariantError(f'cannot compose {len(now)}x{len(now)} and {len(other)}x{len(other)} matrices')
	now_entries, other_entries = _entries(now), _entries(other)
	size = len(now)
	result: Matrix = [ [None] * size for _ in range(size) ]
	for i, (j, m) in enumerate(other_entries):
		k, n = now_entries[j]
		result[i][k] = m + n
	return result

def decode(m: Matrix, group: Optional[Type[WreathElement]] = None) -> WreathElement:
	'''
	reconstructs the element encoded by a matrix. the element belongs to
	`group` if given, and to the automatic `W<n>` class otherwise.
	'''
	if not m:
		raise MatrixInvariantError('cannot decode an empty matrix')
	if group is None:
		group = wreath_group(len(m))
	return group.decode(m)

def format_matrix(m: Matrix, title: Optional[str] = None) -> str:
	''' renders a matrix as a grid of Ring3 symbols, with `_` for absent cells '''
	lines = [ ' '.join('_  ' if x is None else str(x) for x in row) for row in m ]
	if title is not None:
		lines = [f'=== {title} ===', *lines, '=========']
	return '\n'.join(lines)


# AUTOMAGICAL GROUP CREATION
# --------------------------

PREFIXES = {
	'W': WreathElement,
}

def __getattr__(name: str):
	if (m := re.fullmatch(r'(\D+)(\d+)', name)) and (t := PREFIXES.get(m.group(1))) is not None:
		class AutoGroup(t):
			SIZE = int(m.group(2))
		AutoGroup.__name__ = AutoGroup.__qualname__ = name
		globals()[name] = AutoGroup
		return AutoGroup
	raise AttributeError(f'module {__name__!r} has no attribute {name!r}')

def wreath_group(size: int) -> Type[WreathElement]:
	''' the automatic `W<size>` class, created on first use '''
	assert isinstance(size, int) and size > 0, f'size {repr(size)} is not a positive int'
	name = f'W{size}'
	return globals().get(name) or __getattr__(name)
