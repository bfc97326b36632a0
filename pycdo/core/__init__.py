from .mesh import PolyMesh
from .cellmesh import CellMesh, CellMeshBuilder
from .location import MeshLocation, MeshLocations
from .time_step import TimeStep
from .analytic import Analytic
__all__=['PolyMesh','CellMesh','CellMeshBuilder','MeshLocation','MeshLocations','TimeStep','Analytic']
