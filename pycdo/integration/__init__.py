from .quadrature import tet_volumes, voltet, tet_5pts, tet_10pts
from .tessellation import CellTessellation, SubTet
