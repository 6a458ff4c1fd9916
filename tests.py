from typing import Type
import itertools
import logging

import pytest

from wreath import *
from wreath import W2, W3, W4, W8

def verify_bijection(G: Type[Group], count=None):
	elements = iter(G) if count is None else itertools.islice(G, count)
	for i, a in enumerate(elements):
		assert int(a) == i
		assert G[i] == a
		assert hash(G[i]) == hash(a)
	if count is None:
		assert i + 1 == G.ORDER

ZERO, ONE, TWO = Ring3.ZERO, Ring3.ONE, Ring3.TWO
RING = [ZERO, ONE, TWO]

# elements of order 4 over 8 points: a 4-cycle with labels adding up to 0 on it
SAMPLES = [
	W8([[1, 2, 3, 4]], [0, 0, 0, 0, 0, 0, 0, 0]),
	W8([[5, 6, 7, 8]], [0, 0, 0, 0, 0, 0, 0, 0]),
	W8([[2, 7, 6, 3]], [0, 2, 1, 0, 0, 2, 1, 0]),
	W8([[1, 4, 5, 8]], [1, 0, 0, 2, 1, 0, 0, 2]),
	W8([[1, 8, 7, 2]], [2, 1, 0, 0, 0, 0, 2, 1]),
	W8([[3, 6, 5, 4]], [0, 0, 2, 1, 2, 1, 0, 0]),
]


# RING3
# -----

def test_ring_addition_table():
	assert ONE + ONE == TWO
	assert TWO + TWO == ONE
	assert ONE + TWO == ZERO
	assert TWO + ONE == ZERO
	for x in RING:
		assert ZERO + x == x
		assert x + ZERO == x

def test_ring_laws():
	for a in RING:
		assert a + a + a == ZERO
		assert ONE * a == a
		assert ZERO * a == ZERO
	for a, b in itertools.product(RING, repeat=2):
		assert a + b == b + a
		assert a * b == b * a
	for a, b, c in itertools.product(RING, repeat=3):
		assert (a + b) + c == a + (b + c)
		assert (a * b) * c == a * (b * c)
		assert a * (b + c) == a * b + a * c

def test_ring_subtraction():
	for a, b in itertools.product(RING, repeat=2):
		assert a - b + b == a
		assert a - b == a + b.add_inv()
	for a in RING:
		assert a - ZERO == a
		assert ZERO - a == -a
		assert a + -a == ZERO
	assert ONE - TWO == TWO
	assert TWO - ONE == ONE

def test_ring_inverse():
	assert ONE.mul_inv() == ONE
	assert TWO.mul_inv() == TWO
	for a, b in itertools.product(RING, [ONE, TWO]):
		assert a / b * b == a
	with pytest.raises(RingZeroDivisionError):
		ZERO.mul_inv()
	with pytest.raises(ZeroDivisionError):
		ONE / ZERO

def test_ring_remainder_is_unimplemented():
	with pytest.raises(NotImplementedError):
		ONE % TWO

def test_ring_power():
	assert TWO ** 2 == ONE
	assert TWO ** 3 == TWO
	assert TWO ** -1 == TWO
	assert ZERO ** 0 == ONE
	with pytest.raises(RingZeroDivisionError):
		ZERO ** -1

def test_ring_conversions():
	assert [ int(x) for x in RING ] == [0, 1, 2]
	assert Ring3(5) == TWO
	assert Ring3(-1) == TWO
	assert Ring3.from_str('12', 3) == TWO
	assert Ring3.from_str('7') == ONE
	assert Ring3(1) != 1
	assert len({ Ring3(n) for n in range(9) }) == 3
	assert not ZERO and ONE and TWO

def test_ring_formatting():
	assert [ str(x) for x in RING ] == ['1  ', 'w  ', 'w^2']
	assert all(len(str(x)) == 3 for x in RING)
	assert repr(TWO) == 'Ring3(2)'


# PERMUTATION
# -----------

def test_permutation_four_cycle():
	p = Permutation([[1, 2, 3, 4]])
	assert [ p.image(i) for i in range(1, 6) ] == [2, 3, 4, 1, 5]
	assert p(4) == 1
	assert p.k == 4
	assert str(p) == '(1 2 3 4)'
	assert repr(p) == 'Permutation([[1, 2, 3, 4]])'

def test_permutation_identity():
	e = Permutation.ID
	assert e.k == 0 and e.cycles == ()
	assert str(e) == 'e'
	assert repr(e) == 'Permutation.ID'
	assert e.image(7) == 7
	assert e.largest_nontrivial_point() is None
	assert e.reverse_lookup(3) is None
	assert Permutation([]) == e
	assert not e
	assert int(e) == 0

def test_permutation_identity_extension():
	for p in [Permutation([[1, 2, 3, 4]]), Permutation([[3, 1], [5, 4, 2]]), Permutation.ID]:
		for i in range(p.k + 1, p.k + 10):
			assert p.image(i) == i

def test_permutation_equality_is_extension_invariant():
	a = Permutation([[1, 2, 3, 4]])
	b = Permutation([[1, 2, 3, 4], [5]])
	assert (a.k, b.k) == (4, 5)
	assert a == b
	assert hash(a) == hash(b)
	assert a != Permutation([[1, 2, 3, 5]])
	assert str(b) == '(1 2 3 4)(5)'

def test_permutation_malformed_cycles():
	with pytest.raises(MalformedCycleError):
		Permutation([[1, 2], []])
	with pytest.raises(ValueError):
		Permutation([[]])
	with pytest.raises(MalformedCycleError):
		Permutation([[1, 2, 1]])
	with pytest.raises(InvalidPointError):
		Permutation([[0, 1]])

def test_permutation_invalid_points():
	p = Permutation([[1, 2, 3, 4]])
	with pytest.raises(InvalidPointError):
		p.image(0)
	with pytest.raises(InvalidPointError):
		p.reverse_lookup(0)
	with pytest.raises(InvalidPointError):
		p(-3)

def test_permutation_reverse_lookup():
	p = Permutation([[1, 2, 3, 4]])
	assert p.reverse_lookup(2) == 1
	assert p.reverse_lookup(1) == 4
	assert p.reverse_lookup(5) is None
	assert Permutation([[1, 2], [5]]).reverse_lookup(5) == 5
	for i in range(1, 5):
		assert p.reverse_lookup(p(i)) == i

def test_permutation_largest_nontrivial_point():
	p = Permutation([[1, 2], [7]])
	assert p.k == 7
	assert p.largest_nontrivial_point() == 2
	assert Permutation([[3], [4]]).largest_nontrivial_point() is None

def test_permutation_canonical_form():
	p = Permutation([[3, 1], [5, 4, 2]])
	c = p.canonical_form()
	assert c.cycles == ((1, 3), (2, 5, 4))
	assert c == p
	assert str(c) == '(1 3)(2 5 4)'
	trivial = Permutation([[2], [4]]).canonical_form()
	assert trivial.k == 0 and str(trivial) == 'e'

def test_permutation_canonicalization_round_trip():
	samples = [
		Permutation([[3, 1], [5, 4, 2]]),
		Permutation([[1, 2], [9]]),
		Permutation([[6, 2, 7]]),
		*itertools.islice(Permutation, 720),
	]
	for p in samples:
		q = Permutation.from_image_table(p.image_table()).canonical_form()
		assert q == p
		assert q.image_table(p.k) == p.image_table()

def test_permutation_from_image_table():
	p = Permutation.from_image_table([2, 3, 1, 4])
	assert p.cycles == ((1, 2, 3),)
	assert p.k == 3
	assert Permutation.from_image_table([]) == Permutation.ID
	assert Permutation.from_image_table([1, 2, 3]).k == 0
	with pytest.raises(ValueError):
		Permutation.from_image_table([1, 1])
	with pytest.raises(ValueError):
		Permutation.from_image_table([2, 3])

def test_permutation_concatenate():
	a, b = Permutation([[1, 2]]), Permutation([[3, 4]])
	c = a.concatenate(b)
	assert c.cycles == ((1, 2), (3, 4))
	assert str(c) == '(1 2)(3 4)'
	assert [ c(i) for i in range(1, 5) ] == [2, 1, 4, 3]
	assert c == a * b
	assert Permutation.ID.concatenate(a) == a

def test_permutation_cycles_read_right_to_left():
	p = Permutation([[1, 2], [2, 3]])
	assert [ p(i) for i in range(1, 4) ] == [2, 3, 1]
	assert p == Permutation([[1, 2, 3]])
	assert p == Permutation([[1, 2]]) * Permutation([[2, 3]])

def test_permutation_group_operations():
	a = Permutation([[1, 2, 3, 4]])
	b = Permutation([[2, 5]])
	assert a.order() == 4
	assert a ** 4 == Permutation.ID
	assert a ** -1 == a.inv
	assert str(a.inv) == '(4 3 2 1)'
	assert a * a.inv == Permutation.ID
	assert (a * b)(5) == a(b(5)) == 3
	assert a.sign() == 1 and b.sign() == 1 and (a * b).sign() == 0
	assert Permutation([[1, 2], [3, 4, 5]]).order() == 6
	assert a.conj_by(b) == b.inv * a * b
	assert not a.comm(a)
	for k in range(-5, 6):
		assert Group._pow(a, k) == a._pow(k)

def test_permutation_bijection():
	verify_bijection(Permutation, 120)
	first = [ Permutation[i] for i in range(24) ]
	assert len(set(first)) == 24
	assert all((p.largest_nontrivial_point() or 0) <= 4 for p in first)
	assert Permutation[1] == Permutation([[1, 2]])
	assert int(Permutation([[2, 3]])) == 2
	with pytest.raises(IndexError):
		Permutation[-1]


# WREATH ELEMENTS & MATRICES
# --------------------------

def test_identity_encoding():
	e = W8(Permutation.ID, [0] * 8)
	assert e == W8.ID
	m = e.encode()
	for i, j in itertools.product(range(8), repeat=2):
		assert m[i][j] == (ZERO if i == j else None)
	assert decode(m) == e

def test_element_construction():
	x = W4([[1, 2]], [0, 1, 2, 0])
	assert x.perm == Permutation([[1, 2]])
	assert x.labels == (ZERO, ONE, TWO, ZERO)
	assert str(x) == '(1 2) [0, 1, 2, 0]'
	assert repr(x) == 'W4([[1, 2]], [0, 1, 2, 0])'
	assert repr(W4.ID) == 'W4.ID'
	assert str(W4.ID) == 'e [0, 0, 0, 0]'
	assert W4(ID, [1, 0, 0, 0]) == W4([], [ONE, ZERO, ZERO, ZERO])
	with pytest.raises(ValueError):
		W8(ID, [0] * 7)
	with pytest.raises(InvalidPointError):
		W4([[1, 2, 3, 5]])
	assert W4([[1, 2], [6]]).perm.k == 6

def test_encoding_layout():
	x = W8([[1, 2, 3, 4]], [1, 2, 0, 0, 0, 0, 0, 1])
	m = encode(x)
	# point 4 is sent to 1, so row 0 holds its label in column 3
	assert m[0][3] == ONE
	assert m[1][0] == TWO
	assert m[7][7] == ONE
	for row in m:
		assert sum(cell is not None for cell in row) == 1

def test_encode_decode_round_trip():
	for x in SAMPLES:
		y = decode(encode(x))
		assert y == x
		assert y.perm == x.perm and y.labels == x.labels
	for x in W3:
		assert W3.decode(x.encode()) == x
	assert decode(SAMPLES[2].encode()).perm.cycles == ((2, 7, 6, 3),)

def test_composition_identity_law():
	e = W8.ID.encode()
	for x in SAMPLES:
		m = x.encode()
		assert decode(compose(e, m)) == x
		assert decode(compose(m, e)) == x

def test_composition_matches_product():
	for a, b in itertools.product(W3, repeat=2):
		assert W3.decode(compose(b.encode(), a.encode())) == a * b
	u, r = SAMPLES[0], SAMPLES[3]
	assert decode(compose(r.encode(), u.encode())) == u * r

def test_wreath_group_axioms():
	elements = list(W3)
	for a in elements:
		assert a * W3.ID == a == W3.ID * a
		assert a * a.inv == W3.ID
		assert a.inv * a == W3.ID
	for a, b, c in itertools.product(elements[::11], repeat=3):
		assert (a * b) * c == a * (b * c)

def test_inverse_is_negated_transpose():
	for x in SAMPLES + [W4([[1, 3], [2, 4]], [1, 2, 2, 0])]:
		m, n = x.encode(), x.inv.encode()
		for i, j in itertools.product(range(len(m)), repeat=2):
			assert n[i][j] == (None if m[j][i] is None else -m[j][i])

def test_small_order_inverse():
	for x in SAMPLES:
		assert x.order() == 4
		y = x.invert_small_order()
		assert decode(compose(encode(y), encode(x))) == W8.ID
		assert y == x.inv
		assert x * y == W8.ID

def test_small_order_inverse_warns_on_other_orders(caplog):
	x = W3([[1, 2, 3]])
	with caplog.at_level(logging.WARNING, logger='wreath'):
		y = x.invert_small_order()
	assert y == W3.ID
	assert y != x.inv
	assert any(r.levelno == logging.WARNING for r in caplog.records)

	caplog.clear()
	with caplog.at_level(logging.WARNING, logger='wreath'):
		SAMPLES[0].invert_small_order()
	assert not caplog.records

def test_element_order():
	assert W8.ID.order() == 1
	assert W3(ID, [1, 0, 0]).order() == 3
	assert W8([[1, 2, 3, 4]], [1, 0, 0, 0, 0, 0, 0, 0]).order() == 12
	assert W4([[1, 2]], [1, 2, 0, 0]).order() == 2
	for x in itertools.islice(W3, 0, None, 5):
		assert Group._pow(x, x.order(), order_threshold=None) == W3.ID

def test_matrix_invariant_violations():
	m = W3([[1, 2]]).encode()
	missing = [ row[:] for row in m ]
	missing[1] = [None, None, None]
	doubled_row = [ row[:] for row in m ]
	doubled_row[0][0] = ONE
	doubled_column = [ row[:] for row in W3.ID.encode() ]
	doubled_column[1] = [ZERO, None, None]
	for bad in [missing, doubled_row, doubled_column, [[ZERO, None]]]:
		with pytest.raises(MatrixInvariantError):
			compose(m, bad)
		with pytest.raises(MatrixInvariantError):
			compose(bad, m)
		with pytest.raises(MatrixInvariantError):
			decode(bad)
	with pytest.raises(MatrixInvariantError):
		compose(m, W2.ID.encode())
	with pytest.raises(MatrixInvariantError):
		decode([])
	with pytest.raises(MatrixInvariantError):
		W4.decode(m)

def test_format_matrix():
	m = W2([[1, 2]], [1, 2]).encode()
	assert format_matrix(W2.ID.encode()) == '1   _  \n_   1  '
	assert format_matrix(m, 'X') == '=== X ===\n_   w  \nw^2 _  \n========='

def test_automatic_groups():
	assert wreath_group(8) is W8
	assert W8.SIZE == 8
	assert W8.ORDER == 3 ** 8 * 40320
	assert type(decode(SAMPLES[0].encode())) is W8

	class Corners(WreathElement):
		SIZE = 8
	x = Corners([[1, 2, 3, 4]])
	y = decode(x.encode(), Corners)
	assert type(y) is Corners and y == x

	with pytest.raises(AssertionError):
		class Broken(WreathElement):
			pass

def test_wreath_bijection():
	verify_bijection(W2)
	verify_bijection(W3)
	assert W3.ORDER == 162
	assert int(W3.ID) == 0
