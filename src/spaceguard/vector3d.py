'''Double-precision 3D vector value type used for all orbital geometry
Vector3d class definition'''

import numpy as np
from .config import config


class Vector3d:
    """
    Immutable double-precision 3D vector.

    Components are stored in a read-only numpy array; every arithmetic
    operation returns a new Vector3d. Equality is exact component equality,
    use `isclose` for tolerance-based comparison.

    Examples
    --------
    >>> r = Vector3d(1.0, 2.0, 2.0)
    >>> r.magnitude
    3.0
    >>> Vector3d.cross(Vector3d.RIGHT, Vector3d.UP)
    Vector3d(0.0, 0.0, 1.0)
    """
    # ========== CLASS CONSTANTS ==========
    # Magnitudes at or below this normalize to the zero vector
    _NORMALIZE_EPSILON = 1e-15
    # Squared magnitudes below this are treated as zero when projecting
    _PROJECT_EPSILON = 1.40129846432482e-45

    __slots__ = ('_xyz',)
    # numpy scalars defer to __rmul__ instead of broadcasting
    __array_ufunc__ = None

    # ========== CONSTRUCTION ==========
    def __init__(self, x=0.0, y=0.0, z=0.0):
        """
        Parameters
        ----------
        x, y, z : float, optional
            Cartesian components (default 0.0). z may be omitted for
            vectors in the xy-plane.
        """
        self._xyz = np.array([x, y, z], dtype=float)
        self._xyz.flags.writeable = False

    @classmethod
    def from_array(cls, array):
        """
        Create a Vector3d from any 3-element array-like.

        Raises
        ------
        ValueError
            If the input does not have exactly 3 components.
        """
        arr = np.asarray(array, dtype=float).ravel()
        if arr.shape != (3,):
            raise ValueError(f"Vector3d requires 3 components, got {arr.shape[0]}")
        return cls(arr[0], arr[1], arr[2])

    # ========== PROPERTY ACCESS ==========
    @property
    def x(self):
        return float(self._xyz[0])

    @property
    def y(self):
        return float(self._xyz[1])

    @property
    def z(self):
        return float(self._xyz[2])

    @property
    def magnitude(self):
        """Euclidean length"""
        return float(np.sqrt(self.sqr_magnitude))

    @property
    def sqr_magnitude(self):
        """Squared Euclidean length"""
        return float(self._xyz @ self._xyz)

    @property
    def normalized(self):
        """Unit vector in the same direction (zero vector if degenerate)"""
        return Vector3d.normalize(self)

    def to_numpy(self):
        """Return a writeable copy of the components as a numpy array"""
        return self._xyz.copy()

    # ========== VECTOR OPERATIONS ==========
    @staticmethod
    def dot(lhs, rhs):
        """Dot product of two vectors."""
        return float(lhs._xyz @ rhs._xyz)

    @staticmethod
    def cross(lhs, rhs):
        """Cross product of two vectors."""
        return Vector3d(lhs.y * rhs.z - lhs.z * rhs.y,
                        lhs.z * rhs.x - lhs.x * rhs.z,
                        lhs.x * rhs.y - lhs.y * rhs.x)

    @staticmethod
    def normalize(value):
        """
        Return `value` scaled to unit length.

        Vectors with magnitude at or below 1e-15 return the zero vector
        instead of dividing by a vanishing length.
        """
        mag = value.magnitude
        if mag > Vector3d._NORMALIZE_EPSILON:
            return value / mag
        return Vector3d.ZERO

    @staticmethod
    def distance(a, b):
        """Distance between two points."""
        return (a - b).magnitude

    @staticmethod
    def angle(from_vec, to_vec):
        """
        Unsigned angle between two vectors.

        Returns
        -------
        float
            Angle in degrees, in [0, 180].
        """
        dot = Vector3d.dot(from_vec.normalized, to_vec.normalized)
        return float(np.degrees(np.arccos(np.clip(dot, -1.0, 1.0))))

    @staticmethod
    def signed_angle(from_vec, to_vec, axis):
        """Angle in degrees, signed by the rotation sense about `axis`."""
        unsigned = Vector3d.angle(from_vec, to_vec)
        sign = np.sign(Vector3d.dot(axis, Vector3d.cross(from_vec, to_vec)))
        return unsigned * float(sign)

    @staticmethod
    def lerp(a, b, t):
        """
        Linearly interpolate between `a` and `b`.

        The interpolant `t` is clamped to [0, 1].
        """
        t = min(max(t, 0.0), 1.0)
        return Vector3d.lerp_unclamped(a, b, t)

    @staticmethod
    def lerp_unclamped(a, b, t):
        """Linearly interpolate between `a` and `b` without clamping `t`."""
        return Vector3d.from_array(a._xyz + (b._xyz - a._xyz) * t)

    @staticmethod
    def clamp_magnitude(vector, max_length):
        """Return `vector` with its length limited to `max_length`."""
        if vector.sqr_magnitude > max_length * max_length:
            return vector.normalized * max_length
        return vector

    @staticmethod
    def max(lhs, rhs):
        """Component-wise maximum."""
        return Vector3d.from_array(np.maximum(lhs._xyz, rhs._xyz))

    @staticmethod
    def min(lhs, rhs):
        """Component-wise minimum."""
        return Vector3d.from_array(np.minimum(lhs._xyz, rhs._xyz))

    @staticmethod
    def move_towards(current, target, max_distance_delta):
        """Move `current` in a straight line towards `target` by at most `max_distance_delta`."""
        to_vector = target - current
        dist = to_vector.magnitude
        if dist <= max_distance_delta or dist == 0.0:
            return target
        return current + to_vector / dist * max_distance_delta

    @staticmethod
    def project(vector, on_normal):
        """Project `vector` onto the direction of `on_normal`."""
        sqr_mag = Vector3d.dot(on_normal, on_normal)
        if sqr_mag < Vector3d._PROJECT_EPSILON:
            return Vector3d.ZERO
        return on_normal * (Vector3d.dot(vector, on_normal) / sqr_mag)

    @staticmethod
    def project_on_plane(vector, plane_normal):
        """Project `vector` onto the plane orthogonal to `plane_normal`."""
        return vector - Vector3d.project(vector, plane_normal)

    @staticmethod
    def reflect(in_direction, in_normal):
        """Reflect `in_direction` off the plane defined by `in_normal`."""
        return -2.0 * Vector3d.dot(in_normal, in_direction) * in_normal + in_direction

    @staticmethod
    def scale(a, b):
        """Component-wise product."""
        return Vector3d.from_array(a._xyz * b._xyz)

    def isclose(self, other, rtol=None, atol=None):
        """
        Tolerance-based comparison.

        Parameters
        ----------
        other : Vector3d
        rtol, atol : float, optional
            Tolerances passed to np.allclose. Default to
            config.EQUALITY_RTOL and config.EQUALITY_ATOL.
        """
        rtol = config.EQUALITY_RTOL if rtol is None else rtol
        atol = config.EQUALITY_ATOL if atol is None else atol
        return bool(np.allclose(self._xyz, other._xyz, rtol=rtol, atol=atol))

    # ========== OPERATORS ==========
    def __add__(self, other):
        if not isinstance(other, Vector3d):
            return NotImplemented
        return Vector3d.from_array(self._xyz + other._xyz)

    def __sub__(self, other):
        if not isinstance(other, Vector3d):
            return NotImplemented
        return Vector3d.from_array(self._xyz - other._xyz)

    def __neg__(self):
        return Vector3d.from_array(-self._xyz)

    def __mul__(self, scalar):
        if isinstance(scalar, Vector3d):
            return NotImplemented
        return Vector3d.from_array(self._xyz * float(scalar))

    def __rmul__(self, scalar):
        return self.__mul__(scalar)

    def __truediv__(self, scalar):
        if isinstance(scalar, Vector3d):
            return NotImplemented
        return Vector3d.from_array(self._xyz / float(scalar))

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return 3

    def __getitem__(self, index):
        #Allow indexing like v[0]
        return float(self._xyz[index])

    def __iter__(self):
        return iter(self._xyz.tolist())

    def __array__(self, dtype=None, copy=None):
        #Lets numpy functions consume vectors directly
        if dtype is None:
            return self._xyz.copy()
        return self._xyz.astype(dtype)

    def __eq__(self, other):
        #Exact component equality
        if not isinstance(other, Vector3d):
            return NotImplemented
        return bool(np.array_equal(self._xyz, other._xyz))

    def __hash__(self):
        return hash(tuple(self._xyz.tolist()))

    def __repr__(self):
        return f"Vector3d({self.x!r}, {self.y!r}, {self.z!r})"

    def __str__(self):
        return f"({self.x}; {self.y}; {self.z})"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (Vector3d, (self.x, self.y, self.z))


# Named constants
Vector3d.ZERO = Vector3d(0.0, 0.0, 0.0)
Vector3d.ONE = Vector3d(1.0, 1.0, 1.0)
Vector3d.UP = Vector3d(0.0, 1.0, 0.0)
Vector3d.DOWN = Vector3d(0.0, -1.0, 0.0)
Vector3d.LEFT = Vector3d(-1.0, 0.0, 0.0)
Vector3d.RIGHT = Vector3d(1.0, 0.0, 0.0)
Vector3d.FORWARD = Vector3d(0.0, 0.0, 1.0)
Vector3d.BACK = Vector3d(0.0, 0.0, -1.0)
