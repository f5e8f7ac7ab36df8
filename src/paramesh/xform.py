## 4x4 matrix transformations for homogeneous 3D coordinates, used to
## place and orient generated meshes

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

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

from math import cos, sin, pi

from paramesh.vecmath import length3, normalize3

## a matrix is represented as a list of four rows.  Points are treated
## as column vectors with an implied w=1, normals as column vectors
## transformed by the inverse transpose of the upper-left 3x3 block.


def _isnum(x):
    return (not isinstance(x, bool)) and isinstance(x, (int, float))


class Matrix:
    """4x4 transformation matrix for homogeneous 3D coordinates"""

    def __init__(self, a=None):
        self.m = [[1.0, 0.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0, 0.0],
                  [0.0, 0.0, 1.0, 0.0],
                  [0.0, 0.0, 0.0, 1.0]]

        if isinstance(a, Matrix):
            self.m = [list(row) for row in a.m]
        elif isinstance(a, (tuple, list)):
            if len(a) == 4 and all(isinstance(r, (tuple, list)) and len(r) == 4 for r in a):
                vals = [x for row in a for x in row]
            elif len(a) == 16:
                vals = list(a)
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            for ind, x in enumerate(vals):
                if not _isnum(x):
                    raise ValueError('bad element in matrix initialization: {}'.format(x))
                self.m[ind // 4][ind % 4] = float(x)
        elif a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{},{})".format(*self.m)

    def __eq__(self, other):
        return isinstance(other, Matrix) and self.m == other.m

    def get(self, i, j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i, j))
        return self.m[i][j]

    def getrow(self, i):
        return list(self.m[i])

    def getcol(self, j):
        return [self.m[0][j], self.m[1][j], self.m[2][j], self.m[3][j]]

    def transpose(self):
        return Matrix([self.getcol(j) for j in range(4)])

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # scalar, compute xM.
    def mul(self, x):
        if isinstance(x, Matrix):
            return Matrix([[sum(self.m[i][k] * x.m[k][j] for k in range(4))
                            for j in range(4)] for i in range(4)])
        elif _isnum(x):
            return Matrix([[v * x for v in row] for row in self.m])
        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def __matmul__(self, other):
        return self.mul(other)

    def apply_point(self, p):
        """transform an xyz point (w=1), dividing by w when it isn't 1"""
        x, y, z = p[0], p[1], p[2]
        r = [self.m[i][0] * x + self.m[i][1] * y + self.m[i][2] * z + self.m[i][3]
             for i in range(4)]
        if r[3] != 1.0 and r[3] != 0.0:
            return (r[0] / r[3], r[1] / r[3], r[2] / r[3])
        return (r[0], r[1], r[2])

    def apply_normal(self, n):
        """transform a normal by the inverse transpose of the 3x3 block
        and renormalize it"""
        a = self.m
        # cofactor matrix of the 3x3 block is the inverse transpose
        # scaled by the determinant; the scale vanishes on normalization
        c = [[a[1][1] * a[2][2] - a[1][2] * a[2][1],
              a[1][2] * a[2][0] - a[1][0] * a[2][2],
              a[1][0] * a[2][1] - a[1][1] * a[2][0]],
             [a[0][2] * a[2][1] - a[0][1] * a[2][2],
              a[0][0] * a[2][2] - a[0][2] * a[2][0],
              a[0][1] * a[2][0] - a[0][0] * a[2][1]],
             [a[0][1] * a[1][2] - a[0][2] * a[1][1],
              a[0][2] * a[1][0] - a[0][0] * a[1][2],
              a[0][0] * a[1][1] - a[0][1] * a[1][0]]]
        det = a[0][0] * c[0][0] + a[0][1] * c[0][1] + a[0][2] * c[0][2]
        r = [c[i][0] * n[0] + c[i][1] * n[1] + c[i][2] * n[2] for i in range(3)]
        if det < 0:
            r = [-v for v in r]
        return normalize3(r)


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis, angle, inverse=False):
    m = length3(axis)
    if m == 0.0:
        raise ValueError('zero-length rotation axis not allowed')
    ux, uy, uz = normalize3(axis)

    if inverse:
        angle *= -1.0
    rad = (angle % 360.0) * pi / 180.0

    cang = cos(rad)
    cmin = 1.0 - cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin - uz*sang, ux*uz*cmin + uy*sang, 0],
         [uy*ux*cmin + uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
         [uz*ux*cmin - uy*sang, uz*uy*cmin + ux*sang, cang + uz*uz*cmin, 0],
         [0, 0, 0, 1]]

    return Matrix(R)


def Translation(delta, inverse=False):
    dx, dy, dz = delta[0], delta[1], delta[2]
    if inverse:
        dx, dy, dz = -dx, -dy, -dz
    T = [[1, 0, 0, dx],
         [0, 1, 0, dy],
         [0, 0, 1, dz],
         [0, 0, 0, 1]]
    return Matrix(T)


def Scale(x, y=None, z=None, inverse=False):
    if _isnum(x):
        sx = x
        if _isnum(y) and _isnum(z):
            sy, sz = y, z
        else:
            sy = sz = x
    elif isinstance(x, (tuple, list)) and len(x) >= 3:
        sx, sy, sz = x[0], x[1], x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        sx = 1.0 / sx
        sy = 1.0 / sy
        sz = 1.0 / sz

    S = [[sx, 0, 0, 0],
         [0, sy, 0, 0],
         [0, 0, sz, 0],
         [0, 0, 0, 1.0]]
    return Matrix(S)
