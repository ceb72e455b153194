"""Base analyzer class for all pipeline stages in the toolbox."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for pipeline stages (pruning, filtering, partitioning, evaluation).

    All stages must:
    1. Accept their inputs (a dataset, a view, a fitted model) in the constructor
    2. Implement fit() to perform the computation and return self for chaining
    3. Implement result() to return a frozen dataclass with results

    Stages never mutate their inputs. Stages that narrow a dataset return the new
    dataset inside their result.


    ---


    ### Adding a New Stage

    **1. Create the stage class** (in `analysis/my_stage.py`):

    ```python
    from dataclasses import dataclass
    from wle_tlbx.data.base_dataset import BaseDataset

    @dataclass(frozen=True)
    class MyStageResult:
        '''Results package for MyStage.'''
        dataset: BaseDataset
        dropped_columns: list[str]

    class MyStage(BaseAnalyser):
        '''Pure computation (no plotting!).'''

        def __init__(self, dataset: BaseDataset):
            self._dataset = dataset
            self._result = None

        def fit(self) -> "MyStage":
            # ... computation logic ...
            self._result = MyStageResult(...)
            return self

        def result(self) -> MyStageResult:
            if self._result is None:
                raise ValueError("Call fit() first")
            return self._result
    ```

    **2. Add a factory method** to `BaseDataset` (`make_my_stage`) and, if it belongs
    in the default run, a step in :func:`wle_tlbx.pipeline.run_pipeline`.

    ### Adding Visualization Functions

    Plot functions live in `plotting/` and accept `*Result` dataclasses, return a
    matplotlib `Figure`, and forward `**kwargs` to the underlying seaborn call.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the stage.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return stage results as a frozen dataclass instance.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
