## vector arithmetic for yapMesh position, normal and tangent buffers
## Copyright (c) 2025 yapMesh contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""vector arithmetic for **yapMesh** buffers

Positions, normals and tangents in yapMesh are plain Python lists of
three floats, ``[x, y, z]``.  Texture coordinates are lists of two
floats.  Every function here returns a fresh list; no argument is
modified in place, so buffers from one subdivision level are never
aliased by the next.

The evaluation order of each operation is fixed, which keeps the
refinement algorithms deterministic: the same input buffers always give
the same output buffers.
"""

from math import sqrt, pi

from yapmesh.errors import DegenerateGeometryError

## constants
epsilon = 0.000005
pi2 = 2.0*pi

## smallest vector magnitude accepted by normalize()
tiny = 1e-12


## operations on scalars
## -----------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float))

def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a-b) < tol


## constructors
## ------------------------

def vect3(x=0.0, y=0.0, z=0.0):
    """make a 3 vector from scalars, or from any sequence with at
    least three numeric elements"""
    if isinstance(x, (list, tuple)):
        if len(x) < 3:
            raise ValueError('need at least three components: {}'.format(x))
        return [float(x[0]), float(x[1]), float(x[2])]
    return [float(x), float(y), float(z)]

def vect2(u=0.0, v=0.0):
    """make a 2 vector (texture coordinate) from scalars or a sequence"""
    if isinstance(u, (list, tuple)):
        if len(u) < 2:
            raise ValueError('need at least two components: {}'.format(u))
        return [float(u[0]), float(u[1])]
    return [float(u), float(v)]

def zero3():
    return [0.0, 0.0, 0.0]

def isvect3(x):
    """
    check to see if argument is a proper 3 vector for our purposes
    """
    return (isinstance(x, (list, tuple)) and len(x) == 3
            and isgoodnum(x[0]) and isgoodnum(x[1]) and isgoodnum(x[2]))


## R^3 -> R^3 functions
## ------------------------------------------------

def add(a, b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0], a[1]+b[1], a[2]+b[2]]

def sub(a, b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0], a[1]-b[1], a[2]-b[2]]

def scale3(a, c):
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return [a[0]*c, a[1]*c, a[2]*c]

def cross(a, b):
    """ 3 vector cross product `a x b`"""
    return [a[1]*b[2] - a[2]*b[1],
            a[2]*b[0] - a[0]*b[2],
            a[0]*b[1] - a[1]*b[0]]

def midpoint(a, b):
    """ point halfway between ``a`` and ``b``"""
    return [(a[0]+b[0])*0.5, (a[1]+b[1])*0.5, (a[2]+b[2])*0.5]

def centroid(points):
    """ arithmetic mean of a non-empty sequence of 3 vectors"""
    n = len(points)
    if n == 0:
        raise ValueError('centroid of an empty point list')
    x = y = z = 0.0
    for p in points:
        x += p[0]
        y += p[1]
        z += p[2]
    return [x/n, y/n, z/n]

def normalize(a, tol=tiny):
    """return ``a`` scaled to unit length.

    Raises :class:`DegenerateGeometryError` when the magnitude of ``a``
    is not above ``tol``, since there is no direction to preserve.
    """
    m = mag(a)
    if not m > tol:
        raise DegenerateGeometryError(
            'cannot normalize zero-length vector {}'.format(list(a)))
    return [a[0]/m, a[1]/m, a[2]/m]


## R^3 -> R functions
## ----------------------------------------

def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def dist(a, b):
    """ compute the euclidean distance between two points ``a`` and ``b``"""
    return mag(sub(a, b))


__all__ = [
    'epsilon',
    'pi2',
    'tiny',
    'isgoodnum',
    'close',
    'vect3',
    'vect2',
    'zero3',
    'isvect3',
    'add',
    'sub',
    'scale3',
    'cross',
    'midpoint',
    'centroid',
    'normalize',
    'dot',
    'mag',
    'dist',
]
