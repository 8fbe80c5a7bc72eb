from __future__ import annotations
import numpy as np
import numba as nb

# Kernels below take a permutation already relabeled against a reference
# (see ``relabel``), so that distance(p1, p2) == kernel(relabel(p1, p2)).


@nb.njit(cache=True, fastmath=True)
def invert(perm):
    n = perm.size
    out = np.empty(n, np.int64)
    for i in range(n):
        out[int(perm[i])] = i
    return out


@nb.njit(cache=True, fastmath=True)
def relabel(p1, p2):
    # position in p1 of the value found at each position of p2
    inv1 = invert(p1)
    n = p2.size
    out = np.empty(n, np.int64)
    for i in range(n):
        out[i] = inv1[int(p2[i])]
    return out


@nb.njit(cache=True, fastmath=True)
def l2(perm):
    s = 0
    for i in range(perm.size):
        d = int(perm[i]) - i
        s += d * d
    return s


@nb.njit(cache=True, fastmath=True)
def l1(perm):
    s = 0
    for i in range(perm.size):
        s += abs(int(perm[i]) - i)
    return s


@nb.njit(cache=True, fastmath=True)
def lee(perm):
    n = perm.size
    s = 0
    for i in range(n):
        d = abs(int(perm[i]) - i)
        s += min(d, n - d)
    return s


@nb.njit(cache=True, fastmath=True)
def hamming(perm):
    s = 0
    for i in range(perm.size):
        if perm[i] != i:
            s += 1
    return s


@nb.njit(cache=True, fastmath=True)
def lis_len(arr):
    n = arr.size
    tails = np.empty(n, np.int64)
    size = 0
    for x in arr:
        l = 0
        r = size
        while l < r:
            m = (l + r) >> 1
            if tails[m] < x:
                l = m + 1
            else:
                r = m
        tails[l] = x
        if l == size:
            size += 1
    return size


@nb.njit(cache=True, fastmath=True)
def ulam(perm):
    return perm.size - lis_len(perm)


@nb.njit(cache=True, fastmath=True)
def inv(perm):
    n = perm.size
    bit = np.zeros(n + 1, np.int64)
    inv_count = 0
    seen = 0
    for v in perm:
        x = int(v) + 1
        s = 0
        i = x
        while i:
            s += bit[i]
            i &= i - 1
        inv_count += seen - s
        seen += 1
        i = x
        while i <= n:
            bit[i] += 1
            i += i & -i
    return inv_count


@nb.njit(cache=True)
def weighted_inv(perm, w):
    """Sum of w[i] * w[j] over inverted pairs of positions i < j.

    w[k] is the weight of the element at position k. Swapping the roles of
    the two permutations sums the same products in another order, so the
    result is symmetric only up to floating-point rounding.
    """
    n = perm.size
    bit = np.zeros(n + 1, np.float64)
    total = 0.0
    seen = 0.0
    for k in range(n):
        x = int(perm[k]) + 1
        s = 0.0
        i = x
        while i:
            s += bit[i]
            i &= i - 1
        total += w[k] * (seen - s)
        seen += w[k]
        i = x
        while i <= n:
            bit[i] += w[k]
            i += i & -i
    return total


@nb.njit(cache=True, fastmath=True)
def cycle_count(perm):
    n = perm.size
    visited = np.zeros(n, np.uint8)
    cycles = 0
    for i in range(n):
        if visited[i] == 0:
            cycles += 1
            j = i
            while visited[j] == 0:
                visited[j] = 1
                j = int(perm[j])
    return cycles


@nb.njit(cache=True, fastmath=True)
def cayley(perm):
    return perm.size - cycle_count(perm)


@nb.njit(cache=True, fastmath=True)
def k_cycle(perm, k):
    # cost of sorting perm with cycle operations of length at most k
    n = perm.size
    visited = np.zeros(n, np.uint8)
    ops = 0
    for i in range(n):
        if visited[i] == 0:
            length = 0
            j = i
            while visited[j] == 0:
                visited[j] = 1
                j = int(perm[j])
                length += 1
            if length > k:
                ops += (length + k - 3) // (k - 1)
            elif length > 1:
                ops += 1
    return ops


@nb.njit(cache=True, fastmath=True)
def nontrivial_cycles(perm):
    return k_cycle(perm, perm.size + 1)


@nb.njit(cache=True, fastmath=True)
def block_interchange(p1, p2):
    n = p1.size
    inv2 = invert(p2)
    m = n + 2
    p = np.zeros(m, np.int64)
    pinv = np.zeros(m, np.int64)
    visited = np.zeros(m, np.uint8)
    for i in range(n):
        index = inv2[int(p1[i])] + 1
        p[index] = i + 1
        pinv[i + 1] = index
    p[m - 1] = m - 1
    pinv[m - 1] = m - 1
    cycles = 0
    for i in range(n + 1):
        if visited[i] == 0:
            cycles += 1
            j = i
            while visited[j] == 0:
                visited[j] = 1
                j = p[pinv[j + 1] - 1]
    return (n + 1 - cycles) // 2


@nb.njit(cache=True, fastmath=True)
def broken_edges(p1, p2, cyclic, directed):
    # adjacencies of p1 that p2 does not have
    n = p1.size
    if n == 0:
        return 0
    succ = np.empty(n, np.int64)
    for i in range(n - 1):
        succ[int(p2[i])] = p2[i + 1]
    succ[int(p2[n - 1])] = p2[0] if cyclic else -1
    last = n if cyclic else n - 1
    count = 0
    for i in range(last):
        j = i + 1
        if j == n:
            j = 0
        a = int(p1[i])
        b = int(p1[j])
        if succ[a] != b and (directed or succ[b] != a):
            count += 1
    return count


@nb.njit(cache=True, fastmath=True)
def edit_table(a, b, ins, dele, chg, d):
    # d is a caller-allocated (a.size+1, b.size+1) table; its dtype sets the cost arithmetic
    n = a.size
    m = b.size
    d[0, 0] = 0
    for i in range(1, n + 1):
        d[i, 0] = d[i - 1, 0] + dele
    for j in range(1, m + 1):
        d[0, j] = d[0, j - 1] + ins
    for i in range(1, n + 1):
        for j in range(1, m + 1):
            diag = d[i - 1, j - 1] if a[i - 1] == b[j - 1] else d[i - 1, j - 1] + chg
            d[i, j] = min(diag, d[i - 1, j] + dele, d[i, j - 1] + ins)
    return d[n, m]


@nb.njit(cache=True, fastmath=True)
def lcs_len(a, b):
    n = a.size
    m = b.size
    prev = np.zeros(m + 1, np.int64)
    cur = np.zeros(m + 1, np.int64)
    for i in range(1, n + 1):
        for j in range(1, m + 1):
            if a[i - 1] == b[j - 1]:
                cur[j] = prev[j - 1] + 1
            else:
                cur[j] = max(prev[j], cur[j - 1])
        prev, cur = cur, prev
    return prev[m]


# O(n^2) copies of rank.rank / rank.unrank over int64, so that reversal_table
# runs entirely in nopython mode
@nb.njit(cache=True)
def lex_rank(perm):
    n = perm.size
    r = 0
    for i in range(n):
        smaller = 0
        for j in range(i + 1, n):
            if perm[j] < perm[i]:
                smaller += 1
        r = r * (n - i) + smaller
    return r


@nb.njit(cache=True)
def lex_unrank(n, r, out):
    digits = np.empty(n, np.int64)
    for i in range(n - 1, -1, -1):
        digits[i] = r % (n - i)
        r //= n - i
    pool = np.arange(n)
    size = n
    for i in range(n):
        k = digits[i]
        out[i] = pool[k]
        for t in range(k, size - 1):
            pool[t] = pool[t + 1]
        size -= 1


@nb.njit(cache=True)
def reversal_table(n):
    # breadth-first search from the identity over segment reversals, indexed by lex_rank
    total = 1
    for k in range(2, n + 1):
        total *= k
    table = np.empty(total, np.int8)
    table[:] = -1
    queue = np.empty(total, np.int64)
    table[0] = 0
    queue[0] = 0
    head = 0
    tail = 1
    cur = np.empty(n, np.int64)
    while head < tail:
        r = queue[head]
        head += 1
        lex_unrank(n, r, cur)
        for i in range(n - 1):
            for j in range(i + 1, n):
                cur[i:j + 1] = cur[i:j + 1][::-1].copy()
                v = lex_rank(cur)
                cur[i:j + 1] = cur[i:j + 1][::-1].copy()
                if table[v] < 0:
                    table[v] = np.int8(table[r] + 1)
                    queue[tail] = v
                    tail += 1
    return table


@nb.njit(cache=True, fastmath=True)
def dist(dist_id, perm):
    if dist_id == 0:
        return l2(perm)
    elif dist_id == 1:
        return l1(perm)
    elif dist_id == 2:
        return hamming(perm)
    elif dist_id == 3:
        return ulam(perm)
    elif dist_id == 4:
        return inv(perm)
    elif dist_id == 5:
        return cayley(perm)
    else:
        return lee(perm)


DIST_NAME_TO_ID = {
    "L2": 0,
    "L1": 1,
    "Hamming": 2,
    "Ulam": 3,
    "inv": 4,
    "Cayley": 5,
    "Lee": 6,
}
