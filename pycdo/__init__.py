"""pycdo: cellwise source terms for CDO schemes on polyhedral meshes."""
from pycdo.core import PolyMesh, CellMesh, CellMeshBuilder, TimeStep, Analytic
from pycdo.source import (SourceTerm, SourceTermConfigError, SourceTermBuilder,
                          SourceEvaluator, DofDesc, Workspace, compute_cellwise,
                          default_flag, init_source_terms)

__all__ = ['PolyMesh', 'CellMesh', 'CellMeshBuilder', 'TimeStep', 'Analytic',
           'SourceTerm', 'SourceTermConfigError', 'SourceTermBuilder', 'SourceEvaluator',
           'DofDesc', 'Workspace', 'compute_cellwise', 'default_flag', 'init_source_terms']
