from .transform import ModulePass, Status
from .bbtrace import BasicBlockTracePass, TraceBufferProvisioner
from .bbtrace import label_basic_blocks


__all__ = [
    'BasicBlockTracePass',
    'label_basic_blocks',
    'ModulePass',
    'Status',
    'TraceBufferProvisioner',
    ]
