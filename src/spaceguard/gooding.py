'''Gooding's solution of Lambert's problem
R. H. Gooding, "A procedure for the solution of Lambert's orbital boundary-value
problem", Celestial Mechanics and Dynamical Astronomy 48, 145-165 (1990)

The solver works in Gooding's normalized universal variable x, with
x = 0 at the minimum-energy transfer, x -> 1 parabolic and x > 1 hyperbolic.
Only the two-radius, fixed-angle form is exposed; turning the resulting
radial/tangential velocity components into vectors is left to the caller.'''

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .config import config

logger = logging.getLogger(__name__)

PI = math.pi
TWO_PI = 2.0 * PI

# |1 - x^2| threshold below which the series form of T(x) is used
_SERIES_SWITCH = 0.4
# safety caps on the convergent series, never reached in practice
_SERIES_MAX_TERMS = 500

# starter coefficients
_C0 = 1.7
_C1 = 0.5
_C2 = 0.03
_C3 = 0.15
_C41 = 1.0
_C42 = 0.24


class LambertOutcome(Enum):
    NO_SOLUTION = 'none'        # time of flight below the minimum for this m
    ONE_SOLUTION = 'one'
    TWO_SOLUTIONS = 'two'
    SEARCH_FAILED = 'failed'    # minimum-time search did not converge


@dataclass(frozen=True)
class VelocityComponents:
    """Radial and tangential velocity at both ends of one transfer arc"""
    radial_1: float
    tangential_1: float
    radial_2: float
    tangential_2: float


@dataclass(frozen=True)
class GoodingResult:
    """
    Outcome of a single Lambert solve.

    Attributes
    ----------
    outcome : LambertOutcome
        Tag describing how many solutions exist
    solutions : tuple of VelocityComponents
        Zero, one or two solutions, matching `outcome`
    calls : int
        Number of time-function evaluations performed
    """
    outcome: LambertOutcome
    solutions: Tuple[VelocityComponents, ...] = ()
    calls: int = 0

    @property
    def n(self):
        """Solution count in the classic integer convention (-1 on search failure)"""
        return {LambertOutcome.NO_SOLUTION: 0,
                LambertOutcome.ONE_SOLUTION: 1,
                LambertOutcome.TWO_SOLUTIONS: 2,
                LambertOutcome.SEARCH_FAILED: -1}[self.outcome]

    @property
    def has_solution(self):
        return len(self.solutions) > 0


class _SearchState(Enum):
    STARTING = 1
    REFINING = 2
    MULTI_REV_RETRY = 3
    DONE = 4


def _d8rt(x):
    #eighth root
    return math.sqrt(math.sqrt(math.sqrt(x)))


class _TimeFunction:
    """
    Dimensionless time of flight T(x) and its first three x-derivatives
    for a fixed geometry (m, q, qsqfm1), counting evaluations.
    """

    def __init__(self, m, q, qsqfm1):
        self.m = m
        self.q = q
        self.qsqfm1 = qsqfm1
        self.calls = 0

    def __call__(self, x, order):
        """
        Evaluate T and derivatives up to `order`.

        Parameters
        ----------
        x : float
            Universal variable
        order : int
            0..3 for T and up to its third derivative. The special order -1
            skips T and instead returns the quantities needed for velocity
            recovery as (0, qz-x, qz+x, z+qx).

        Returns
        -------
        tuple of float
            (t, dt, d2t, d3t)
        """
        self.calls += 1
        m, q, qsqfm1 = self.m, self.q, self.qsqfm1

        velocity_terms = order == -1
        l1 = order >= 1
        l2 = order >= 2
        l3 = order == 3
        qsq = q * q
        xsq = x * x
        u = (1.0 - x) * (1.0 + x)
        t = dt = d2t = d3t = 0.0

        if velocity_terms or m > 0 or x < 0.0 or abs(u) > _SERIES_SWITCH:
            # direct computation
            y = math.sqrt(abs(u))
            z = math.sqrt(qsqfm1 + qsq * xsq)
            qx = q * x
            a = b = aa = bb = 0.0
            if qx <= 0.0:
                a = z - qx
                b = q * z - x
            if qx < 0.0 and velocity_terms:
                aa = qsqfm1 / a
                bb = qsqfm1 * (qsq * u - xsq) / b
            if (qx == 0.0 and velocity_terms) or qx > 0.0:
                aa = z + qx
                bb = q * z + x
            if qx > 0.0:
                a = qsqfm1 / aa
                b = qsqfm1 * (qsq * u - xsq) / bb
            if velocity_terms:
                return 0.0, b, bb, aa

            if qx * u >= 0.0:
                g = x * z + q * u
            else:
                g = (xsq - qsq * u) / (x * z - q * u)
            f = a * y
            if x <= 1.0:
                t = m * PI + math.atan2(f, g)
            elif f > _SERIES_SWITCH:
                t = math.log(f + g)
            else:
                # atanh(f / g) by series, f small
                fg1 = f / (g + 1.0)
                term = 2.0 * fg1
                fg1sq = fg1 * fg1
                t = term
                twoi1 = 1.0
                for _ in range(_SERIES_MAX_TERMS):
                    twoi1 += 2.0
                    term *= fg1sq
                    told = t
                    t += term / twoi1
                    if t == told:
                        break
            t = 2.0 * (t / y + b) / u

            if l1 and z != 0.0:
                qz = q / z
                qz2 = qz * qz
                qz = qz * qz2
                dt = (3.0 * x * t - 4.0 * (a + qx * qsqfm1) / z) / u
                if l2:
                    d2t = (3.0 * t + 5.0 * x * dt + 4.0 * qz * qsqfm1) / u
                if l3:
                    d3t = (8.0 * dt + 7.0 * x * d2t - 12.0 * qz * qz2 * x * qsqfm1) / u
            return t, dt, d2t, d3t

        # series expansion near x = 1 (only m = 0, x >= 0)
        u0i = u1i = u2i = u3i = 1.0
        term = 4.0
        tq = q * qsqfm1
        if q < 0.5:
            tqsum = 1.0 - q * qsq
        else:
            tqsum = (1.0 / (1.0 + q) + q) * qsqfm1
        ttmold = term / 3.0
        t = ttmold * tqsum

        i = 0
        while i < _SERIES_MAX_TERMS:
            i += 1
            p = float(i)
            u0i *= u
            if l1 and i > 1:
                u1i *= u
            if l2 and i > 2:
                u2i *= u
            if l3 and i > 3:
                u3i *= u
            term = term * (p - 0.5) / p
            tq *= qsq
            tqsum += tq
            told = t
            tterm = term / (2.0 * p + 3.0)
            tqterm = tterm * tqsum
            t -= u0i * ((1.5 * p + 0.25) * tqterm / (p * p - 0.25) - ttmold * tq)
            ttmold = tterm
            tqterm *= p
            if l1:
                dt += tqterm * u1i
            if l2:
                d2t += tqterm * u2i * (p - 1.0)
            if l3:
                d3t += tqterm * u3i * (p - 1.0) * (p - 2.0)
            if i >= order and t == told:
                break

        if l3:
            d3t = 8.0 * x * (1.5 * d2t - xsq * d3t)
        if l2:
            d2t = 2.0 * (2.0 * xsq * d2t - dt)
        if l1:
            dt = -2.0 * x * dt
        t /= xsq
        return t, dt, d2t, d3t


def _solve_for_x(tfun, tin):
    """
    Find the universal-variable solution(s) x of T(x) = tin.

    Returns
    -------
    tuple
        (n, x, xpl) with n in {-1, 0, 1, 2}. With n == 2, `xpl` holds the
        solution on the far side of the minimum-time point.
    """
    m, q, qsqfm1 = tfun.m, tfun.q, tfun.qsqfm1
    thr2 = math.atan2(qsqfm1, 2.0 * q) / PI

    n = 0
    x = xpl = 0.0
    xm = tmin = tdiffm = d2t2 = 0.0
    state = _SearchState.STARTING

    while state is not _SearchState.DONE:
        if state is _SearchState.STARTING:
            if m == 0:
                # single-rev starter from T at x = 0 and bilinear approximation
                n = 1
                t0 = tfun(0.0, 0)[0]
                tdiff = tin - t0
                if tdiff <= 0.0:
                    # dT/dx = -4 at x = 0
                    x = t0 * tdiff / (-4.0 * tin)
                else:
                    x = -tdiff / (tdiff + 4.0)
                    w = x + _C0 * math.sqrt(2.0 * (1.0 - thr2))
                    if w < 0.0:
                        x -= math.sqrt(_d8rt(-w)) * (x + math.sqrt(tdiff / (tdiff + 1.5 * t0)))
                    w = 4.0 / (4.0 + tdiff)
                    x *= 1.0 + x * (_C1 * w - _C2 * x * math.sqrt(w))
                state = _SearchState.REFINING
                continue

            # multi-rev: locate T(min) first, by Halley on dT/dx = 0
            xm = 1.0 / (1.5 * (m + 0.5) * PI)
            if thr2 < 0.5:
                xm *= _d8rt(2.0 * thr2)
            elif thr2 > 0.5:
                xm *= 2.0 - _d8rt(2.0 - 2.0 * thr2)

            located = False
            d2t = 0.0
            for _ in range(config.GOODING_TMIN_MAX_ITER):
                tmin, dt, d2t, d3t = tfun(xm, 3)
                if d2t == 0.0:
                    located = True
                    break
                xmold = xm
                xm -= dt * d2t / (d2t * d2t - dt * d3t / 2.0)
                if abs(xmold / xm - 1.0) <= config.GOODING_TMIN_TOL:
                    located = True
                    break
            if not located:
                return -1, x, xpl

            tdiffm = tin - tmin
            if tdiffm < 0.0:
                return 0, x, xpl
            if tdiffm == 0.0:
                return 1, xm, xpl

            n = 3
            if d2t == 0.0:
                d2t = 6.0 * m * PI
            x = math.sqrt(tdiffm / (d2t / 2.0 + tdiffm / (1.0 - xm) ** 2))
            w = xm + x
            w = w * 4.0 / (4.0 + tdiffm) + (1.0 - w) ** 2
            x = x * (1.0 - (1.0 + m + _C41 * (thr2 - 0.5)) / (1.0 + _C3 * m)
                     * x * (_C1 * w + _C2 * x * math.sqrt(w))) + xm
            d2t2 = d2t / 2.0
            if x >= 1.0:
                # no finite solution with x > xm
                n = 1
                state = _SearchState.MULTI_REV_RETRY
            else:
                state = _SearchState.REFINING

        elif state is _SearchState.REFINING:
            for _ in range(config.GOODING_HALLEY_ITER):
                t, dt, d2t, _ = tfun(x, 2)
                t = tin - t
                if dt != 0.0:
                    x += t * dt / (dt * dt + t * d2t / 2.0)
            if n == 3:
                n = 2
                xpl = x
                state = _SearchState.MULTI_REV_RETRY
            else:
                state = _SearchState.DONE

        elif state is _SearchState.MULTI_REV_RETRY:
            # second multi-rev starter, on the x < xm side
            t0 = tfun(0.0, 0)[0]
            tdiff0 = t0 - tmin
            tdiff = tin - t0
            if tdiff <= 0.0:
                x = xm - math.sqrt(tdiffm / (d2t2 - tdiffm * (d2t2 / tdiff0 - 1.0 / xm ** 2)))
            else:
                x = -tdiff / (tdiff + 4.0)
                w = x + _C0 * math.sqrt(2.0 * (1.0 - thr2))
                if w < 0.0:
                    x -= math.sqrt(_d8rt(-w)) * (x + math.sqrt(tdiff / (tdiff + 1.5 * t0)))
                w = 4.0 / (4.0 + tdiff)
                x *= 1.0 + (1.0 + m + _C42 * (thr2 - 0.5)) / (1.0 + _C3 * m) \
                    * x * (_C1 * w - _C2 * x * math.sqrt(w))
                if x <= -1.0:
                    # no finite solution with x < xm
                    n -= 1
                    if n == 1:
                        x = xpl
            if n == 0:
                return 0, x, xpl
            state = _SearchState.REFINING

    return n, x, xpl


def lamrhg(gm: float, r1: float, r2: float, th: float, tdelt: float) -> GoodingResult:
    """
    Solve Lambert's problem for radial and tangential velocity components.

    Parameters
    ----------
    gm : float
        Gravitational parameter [length³/time²]
    r1, r2 : float
        Radii at departure and arrival [length]
    th : float
        Transfer angle [rad], >= 0. Each full 2π beyond the first encodes
        one complete revolution before arrival.
    tdelt : float
        Time of flight [time], > 0

    Returns
    -------
    GoodingResult
        Tagged outcome with zero, one or two VelocityComponents. For two
        solutions, the first lies on the x < x_min side of the minimum-time
        point.

    Raises
    ------
    ValueError
        If gm, r1, r2 or tdelt are not positive, or th is negative
    """
    if gm <= 0 or r1 <= 0 or r2 <= 0:
        raise ValueError(f"gm, r1 and r2 must be positive, got {gm}, {r1}, {r2}")
    if tdelt <= 0:
        raise ValueError(f"Time of flight must be positive, got {tdelt}")
    if th < 0:
        raise ValueError(f"Transfer angle must be non-negative, got {th}")

    m = int(th / TWO_PI)
    thr2 = th / 2.0 - m * PI
    dr = r1 - r2
    r1r2 = r1 * r2
    r1r2th = 4.0 * r1r2 * math.sin(thr2) ** 2
    csq = dr * dr + r1r2th
    c = math.sqrt(csq)
    s = (r1 + r2 + c) / 2.0
    gms = math.sqrt(gm * s / 2.0)
    qsqfm1 = c / s
    q = math.sqrt(r1r2) * math.cos(thr2) / s
    if c != 0.0:
        rho = dr / c
        sig = r1r2th / csq
    else:
        rho = 0.0
        sig = 1.0
    t = 4.0 * gms * tdelt / s ** 2

    tfun = _TimeFunction(m, q, qsqfm1)
    n, x1, x2 = _solve_for_x(tfun, t)

    if n == -1:
        logger.debug("Minimum-time search failed for m = %d", m)
        return GoodingResult(LambertOutcome.SEARCH_FAILED, (), tfun.calls)
    if n == 0:
        logger.debug("No solution for m = %d (T = %.6e)", m, t)
        return GoodingResult(LambertOutcome.NO_SOLUTION, (), tfun.calls)

    solutions = []
    for x in (x1, x2)[:n]:
        _, qzminx, qzplx, zplqx = tfun(x, -1)
        vt2 = gms * zplqx * math.sqrt(sig)
        solutions.append(VelocityComponents(
            radial_1=gms * (qzminx - qzplx * rho) / r1,
            tangential_1=vt2 / r1,
            radial_2=-gms * (qzminx + qzplx * rho) / r2,
            tangential_2=vt2 / r2))

    outcome = LambertOutcome.ONE_SOLUTION if n == 1 else LambertOutcome.TWO_SOLUTIONS
    logger.debug("m = %d: %s after %d evaluations", m, outcome.name, tfun.calls)
    return GoodingResult(outcome, tuple(solutions), tfun.calls)
