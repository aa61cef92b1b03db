"""
Solver pipeline — ``__init__.py`` re-exports the public entry points.

    load_build_plan → provision → solve_with_solver → compute_outcome
"""

from depsolver.core.services.solver.build_plan import (  # noqa: F401
    BuildPlanLookup,
    SnapshotStore,
    load_build_plan,
    resolve_compiler,
    snapshot_packages,
)
from depsolver.core.services.solver.constraint_file import (  # noqa: F401
    build_constraint_file,
)
from depsolver.core.services.solver.environment import (  # noqa: F401
    CompilerProvisioner,
    LocalCompilerProvisioner,
    provision,
)
from depsolver.core.errors import (  # noqa: F401
    BuildPlanError,
    CompilerDetectionFailed,
    ConfigDocumentUnreadable,
    EnvironmentProvisionFailed,
    MissingSolverExecutable,
    SolverError,
    SolverInvocationFailed,
    UnparseableOutputLines,
)
from depsolver.core.services.solver.invoker import (  # noqa: F401
    invoke_solver,
    solve_with_solver,
)
from depsolver.core.services.solver.output_parser import (  # noqa: F401
    parse_solver_output,
    render_solver_plan,
)
from depsolver.core.services.solver.reconcile import (  # noqa: F401
    ExtraDepsReport,
    compute_outcome,
    solve_extra_deps,
    solve_resolver_spec,
)
