# llolutil

Small numerical utilities for estimation code: running statistics, timers,
a few linear-algebra helpers and a dense Levenberg-Marquardt least squares
solver.

## Modules

- `llolutil.stats` – `Stats`, a running count, sum, min, max, last value and
  mean. Two `Stats` can be merged with `+` and `+=`. The value type is set by
  the `zero`, `lowest` and `highest` arguments; floats are the default.
- `llolutil.timer` – `Timer`, a nanosecond stopwatch that starts on
  construction and can `start`, `stop`, `resume` and `reset`; `elapsed()`
  reads it without stopping.
- `llolutil.manager` – `StatsManager` (float statistics) and `TimerManager`
  (durations in integer nanoseconds), thread-safe collections of named `Stats`.
  `update` merges stats into an entry, `get_stats` returns a copy (empty if the
  name is unknown), `report`, `report_all` and `report_stats` format entries as
  coloured text. `StatsManager.get_ref` returns the live entry, creating it if
  needed. `TimerManager.manual` gives a `ManualTimer` that records on `stop`
  and hands its stats to the manager on `commit`; `TimerManager.scoped` gives a
  started `ScopedTimer` that commits when its `with` block ends.
  `global_stats_manager()` and `global_timer_manager()` return shared instances.
- `llolutil.numerics` – `hat3`, `sq`, `deg2rad`, `rad2deg`, `SinCos`,
  `asin_approx`, `atan2_approx`, running `MeanVar` and `MeanCovar`,
  `make_right_handed` (returns the possibly reordered eigenvalues and
  eigenvectors), `matrix_sqrt_utu` (upper Cholesky factor, `A = U.T @ U`) and
  `wrap_cols`.
- `llolutil.ocv` – image type codes (`make_type`, `cv_type_str`, e.g.
  `"32FC4"`), the frozen `CvRange` and `CvSize` value types with integer
  division that truncates toward zero, and `repr_mat`, `repr_size`,
  `repr_range`. `repr_mat` takes a 2- or 3-dimensional numpy array and raises
  `ValueError` for other shapes or unsupported element types.
- `llolutil.nlls` – `NllsSolver`, a dense Levenberg-Marquardt solver with
  Jacobi scaling for cost functions that subclass `CostBase`. With
  `NllsOptions.min_eigenvalue > 0` it remaps steps away from degenerate
  directions. `get_jtj()` returns the scaled normal matrix of the last
  evaluation.
- `llolutil.solver` – `TinySolver`, the same algorithm for any callable
  `function(x, with_jacobian)`. Sizes come from integer `NUM_RESIDUALS` /
  `NUM_PARAMETERS` attributes, from `num_residuals()` / `num_parameters()`
  methods, or from the data itself. The Jacobian may be a
  `(residuals, parameters)` array or a flat column-major sequence.

Both solvers return a summary (`NllsSummary` / `SolverSummary`) with the
initial and final cost, gradient norm, iteration count, number of degenerate
directions and a status; `report()` formats it and `is_converged()` tells
whether a tolerance was reached.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Running statistics and timing:

```python
from llolutil.manager import StatsManager, TimerManager

tm = TimerManager("pipeline")
with tm.scoped("load"):
    ...
print(tm.report_all(True))

sm = StatsManager("counts")
sm.get_ref("points").add(1024)
print(sm.report("points"))
```

Running mean and covariance:

```python
import numpy as np
from llolutil.numerics import MeanCovar

mc = MeanCovar(3)
for x in np.random.rand(20, 3):
    mc.add(x)
print(mc.mean, mc.covar())
```

Least squares:

```python
import numpy as np
from llolutil.nlls import CostBase, NllsSolver

class Example(CostBase):
    def num_residuals(self):
        return 2

    def num_parameters(self):
        return 3

    def compute(self, x, with_jacobian=True):
        x0, y, z = x
        r = np.array([x0 + 2 * y + 4 * z, y * z])
        jac = np.array([[1.0, 2.0, 4.0], [0.0, z, y]]) if with_jacobian else None
        return r, jac

x = np.array([0.76026643, -30.01799744, 0.55192142])
solver = NllsSolver()
summary = solver.solve(Example(), x)
print(summary.report(), x)
```

`solve` needs a float64 numpy array, updates it in place and returns the
summary, which is also kept on `solver.summary`. A cost function signals a
failed evaluation by returning `None`.

## What it does not do

This is a library of building blocks only. It has no command-line program,
reads no sensor data, and contains no odometry pipeline, point-cloud handling
or visualisation; the solvers work only on dense problems small enough to
hold the full Jacobian in memory.