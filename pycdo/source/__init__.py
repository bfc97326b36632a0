from .descriptor import (SourceTerm, ArrayDesc, SourceTermConfigError, default_flag,
                         destroy_source_terms, N_MAX_SOURCE_TERMS)
from .workspace import Workspace
from .mask import build_source_mask
from .dispatch import SourceTermBuilder, SourceTermSetup, init_source_terms
from .cellwise import compute_cellwise, compute_setup_cellwise
from .evaluate import DofDesc, SourceEvaluator
__all__=['SourceTerm','ArrayDesc','SourceTermConfigError','default_flag','destroy_source_terms',
         'N_MAX_SOURCE_TERMS','Workspace','build_source_mask','SourceTermBuilder','SourceTermSetup',
         'init_source_terms','compute_cellwise','compute_setup_cellwise','DofDesc','SourceEvaluator']
