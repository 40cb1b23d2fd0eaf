## 4x4 frame transformations for yapMesh entities
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

import yapmesh.geom as geom

## Every mesh and analytic surface carries a frame, the local-to-world
## transformation used by the renderer.  Refinement works entirely in
## local coordinates; the frame is only copied along (surface to display
## mesh) and applied to points by the render views in yapmesh.mesh.

## A matrix is a list of four rows of four numbers.  Points are lifted
## to w=1 before multiplication.


class Matrix:
    """4x4 transformation matrix for homogeneous 3D coordinates"""

    def __init__(self, a=None):
        self.m = [[1.0, 0.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0, 0.0],
                  [0.0, 0.0, 1.0, 0.0],
                  [0.0, 0.0, 0.0, 1.0]]

        if a is None:
            return
        if isinstance(a, Matrix):
            self.m = [list(row) for row in a.m]
            return
        if isinstance(a, (tuple, list)):
            if len(a) == 16:
                a = [a[0:4], a[4:8], a[8:12], a[12:16]]
            if len(a) == 4 and all(len(r) == 4 for r in a):
                for i in range(4):
                    for j in range(4):
                        x = a[i][j]
                        if not geom.isgoodnum(x):
                            raise ValueError('bad element in matrix initialization: {}'.format(x))
                        self.m[i][j] = float(x)
                return
        raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({})".format(self.m)

    def __eq__(self, other):
        return isinstance(other, Matrix) and self.m == other.m

    def transform_point(self, p):
        m = self.m
        x = m[0][0]*p[0] + m[0][1]*p[1] + m[0][2]*p[2] + m[0][3]
        y = m[1][0]*p[0] + m[1][1]*p[1] + m[1][2]*p[2] + m[1][3]
        z = m[2][0]*p[0] + m[2][1]*p[1] + m[2][2]*p[2] + m[2][3]
        w = m[3][0]*p[0] + m[3][1]*p[1] + m[3][2]*p[2] + m[3][3]
        if w != 1.0:
            if geom.close(w, 0.0, geom.tiny):
                raise ValueError('point maps to infinity under {}'.format(self))
            return [x/w, y/w, z/w]
        return [x, y, z]


def Translation(delta, inverse=False):
    dx, dy, dz = geom.vect3(delta)
    if inverse:
        dx, dy, dz = -dx, -dy, -dz
    return Matrix([[1, 0, 0, dx],
                   [0, 1, 0, dy],
                   [0, 0, 1, dz],
                   [0, 0, 0, 1]])


__all__ = ['Matrix', 'Translation']
