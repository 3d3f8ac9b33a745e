"""
One open plan: reducer state plus the async boundary calls around it.

PlanSession owns the PlanState exclusively. Mutations go through
``dispatch`` synchronously and in call order; only ``load``, ``save``,
``save_as_preset`` and ``convert`` touch the store, each under the boundary
timeout. A failed boundary call leaves slots and the dirty flag as they
were so the call can be retried.
"""

import uuid

from ..core.config import BOUNDARY_TIMEOUT_SECONDS
from ..core.models import PlanState
from ..core.projector import ProgramProjection, project_program
from ..core.reducer import Action, LoadTemplate, MarkSaved, SaveError, Saving, reduce
from ..core.taxonomy import Taxonomy, get_default_taxonomy
from ..core.volume import PlanVolume, compute_plan_volume
from .boundary import BoundaryError, PersistenceError, call_with_timeout
from .plan_store import PlanStore
from .serializers import ValidationError, projection_to_dict, record_to_plan, state_to_record


class PlanSession:
    def __init__(
        self,
        store: PlanStore,
        state: PlanState | None = None,
        taxonomy: Taxonomy | None = None,
        timeout: float = BOUNDARY_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.state = state if state is not None else PlanState()
        self.taxonomy = taxonomy if taxonomy is not None else get_default_taxonomy()
        self.timeout = timeout
        # id reserved for a plan that has never been saved; reused by retries
        self._new_plan_id: str | None = None

    def dispatch(self, *actions: Action) -> PlanState:
        """Apply actions in order and return the resulting state."""
        for action in actions:
            self.state = reduce(self.state, action)
        return self.state

    def volume(self) -> PlanVolume:
        return compute_plan_volume(self.state.slots, self.taxonomy)

    def projection(self, owner_id: str | None = None) -> ProgramProjection:
        return project_program(self.state.slots, self.state.name, owner_id, taxonomy=self.taxonomy)

    async def load(self, plan_id: str) -> PlanState:
        """
        Hydrate the session from a stored plan (clean state, empty history).

        Raises:
            BoundaryError: If the plan cannot be read in time
        """
        record = await call_with_timeout(
            self.store.load_plan, plan_id, timeout=self.timeout, label="load plan"
        )
        try:
            name, description, slots = record_to_plan(record)
        except ValidationError as e:
            raise PersistenceError(f"load plan failed: {e}") from e
        return self.dispatch(LoadTemplate(plan_id, name, description, slots))

    async def save(self) -> str:
        """
        Persist the current snapshot.

        A plan saved for the first time gets its id here, before the store
        call, and keeps it across retries: a save that timed out but still
        reached the store is overwritten by the retry, not duplicated.

        On success the plan id is recorded and the dirty flag cleared; on
        failure only the saving flag is reset and the error re-raised.

        Raises:
            BoundaryError: If the store call fails or times out
        """
        record = state_to_record(self.state)
        plan_id = self.state.plan_id
        if plan_id is None:
            if self._new_plan_id is None:
                self._new_plan_id = str(uuid.uuid4())
            plan_id = self._new_plan_id
        self.dispatch(Saving())
        try:
            await call_with_timeout(
                self.store.save_plan,
                plan_id,
                record,
                timeout=self.timeout,
                label="save plan",
            )
        except BoundaryError:
            self.dispatch(SaveError())
            raise
        self.dispatch(MarkSaved(plan_id))
        return plan_id

    async def save_as_preset(self) -> str:
        """Store a preset copy of the plan; the open plan keeps its own id and dirty flag."""
        return await call_with_timeout(
            self.store.save_as_preset,
            state_to_record(self.state),
            timeout=self.timeout,
            label="save preset",
        )

    async def convert(self, owner_id: str | None = None) -> tuple[str, ProgramProjection]:
        """
        Convert the plan into a program and record it.

        The projection is computed from the in-memory slots; if the plan has
        been saved, its record remembers the resulting program id.

        Returns:
            (program id, projection)
        """
        projection = self.projection(owner_id)
        program_id = await call_with_timeout(
            self.store.save_program,
            projection_to_dict(projection),
            timeout=self.timeout,
            label="convert plan",
        )
        if self.state.plan_id is not None:
            await call_with_timeout(
                self.store.set_converted_program_id,
                self.state.plan_id,
                program_id,
                timeout=self.timeout,
                label="record conversion",
            )
        return program_id, projection
