"""
Work order lifecycle engine.

Pure logic, no database access: given the current status, the requested
status and how many photos the work order has (attached + staged), decide
whether the move is legal and what it records.

State machine (initial state Active, terminal state Done):

    Active      -> In Progress, Review*
    In Progress -> Active, Review*
    Review      -> Done
    Done        -> (none)

    * requires at least one photo

Requesting In Progress while already In Progress is the idempotent Start
action: accepted, but nothing changes and nothing is recorded.
"""

from dataclasses import dataclass

from core.exceptions import TransitionError


class WorkOrderStatus:
    """Work order status constants."""
    ACTIVE = 'active'
    IN_PROGRESS = 'in_progress'
    REVIEW = 'review'
    DONE = 'done'

    CHOICES = [
        (ACTIVE, 'Active'),
        (IN_PROGRESS, 'In Progress'),
        (REVIEW, 'Review'),
        (DONE, 'Done'),
    ]

    ALL = [ACTIVE, IN_PROGRESS, REVIEW, DONE]

    INITIAL = ACTIVE
    TERMINAL_STATES = [DONE]

    # Grouping used by the list "tabs"
    OPEN_STATES = [ACTIVE, IN_PROGRESS]

    @classmethod
    def label(cls, value):
        return dict(cls.CHOICES).get(value, value)


class WorkOrderAction:
    """User-facing lifecycle actions and the status each one requests."""
    START = 'start'
    REVIEW = 'review'
    DONE = 'done'

    TARGETS = {
        START: WorkOrderStatus.IN_PROGRESS,
        REVIEW: WorkOrderStatus.REVIEW,
        DONE: WorkOrderStatus.DONE,
    }


ALLOWED_TRANSITIONS = {
    WorkOrderStatus.ACTIVE: [WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.REVIEW],
    WorkOrderStatus.IN_PROGRESS: [WorkOrderStatus.ACTIVE, WorkOrderStatus.REVIEW],
    WorkOrderStatus.REVIEW: [WorkOrderStatus.DONE],
    WorkOrderStatus.DONE: [],
}

# Target states that need photographic evidence
PHOTO_REQUIRED_STATES = [WorkOrderStatus.REVIEW]

# Same-state requests that are accepted as no-ops
IDEMPOTENT_STATES = [WorkOrderStatus.IN_PROGRESS]


@dataclass(frozen=True)
class TransitionPlan:
    """Outcome of a validated transition request."""
    from_status: str
    to_status: str

    @property
    def is_noop(self):
        return self.from_status == self.to_status

    @property
    def history_action(self):
        """Label recorded in the work order history."""
        return WorkOrderStatus.label(self.to_status)

    @property
    def description(self):
        return (
            f"Status changed from {WorkOrderStatus.label(self.from_status)} "
            f"to {WorkOrderStatus.label(self.to_status)}"
        )


def plan_transition(current_status, requested_status, photo_count=0):
    """
    Validate a status change.

    Returns a TransitionPlan; raises TransitionError when the move is
    illegal or a precondition is not met.
    """
    if requested_status not in WorkOrderStatus.ALL:
        raise TransitionError(
            f'"{requested_status}" is not a work order status.',
            from_status=current_status,
            to_status=requested_status,
        )

    if current_status not in WorkOrderStatus.ALL:
        raise TransitionError(
            f'Work order is in an unknown status "{current_status}".',
            from_status=current_status,
            to_status=requested_status,
        )

    if current_status == requested_status:
        if requested_status in IDEMPOTENT_STATES:
            return TransitionPlan(current_status, requested_status)
        raise TransitionError(
            f'Work order is already {WorkOrderStatus.label(current_status)}.',
            from_status=current_status,
            to_status=requested_status,
        )

    allowed = ALLOWED_TRANSITIONS[current_status]
    if requested_status not in allowed:
        permitted = ', '.join(WorkOrderStatus.label(s) for s in allowed) or 'none (final state)'
        raise TransitionError(
            f'Cannot move a work order from {WorkOrderStatus.label(current_status)} '
            f'to {WorkOrderStatus.label(requested_status)}. Allowed: {permitted}.',
            from_status=current_status,
            to_status=requested_status,
        )

    if requested_status in PHOTO_REQUIRED_STATES and photo_count < 1:
        raise TransitionError(
            f'At least one photo is required before moving to '
            f'{WorkOrderStatus.label(requested_status)}.',
            from_status=current_status,
            to_status=requested_status,
        )

    return TransitionPlan(current_status, requested_status)


def can_transition(current_status, requested_status, photo_count=0):
    try:
        plan_transition(current_status, requested_status, photo_count)
    except TransitionError:
        return False
    return True


def transition(work_order, requested_status, photo_count=0):
    """
    Apply a validated status change to an in-memory work order.

    The object is only mutated when the plan is legal and not a no-op;
    persisting it is the caller's job.
    """
    plan = plan_transition(work_order.status, requested_status, photo_count)
    if not plan.is_noop:
        work_order.status = plan.to_status
    return plan


def available_actions(current_status, photo_count=0):
    """
    Which lifecycle actions are currently enabled.

    Start is offered only from Active (re-issuing it later is a harmless
    no-op, so there is nothing to offer). Done is enabled only where the
    transition table allows it, i.e. from Review; that also keeps it
    disabled while In Progress, not just while Active or Done.
    """
    return {
        WorkOrderAction.START: current_status == WorkOrderStatus.ACTIVE,
        WorkOrderAction.REVIEW: can_transition(current_status, WorkOrderStatus.REVIEW, photo_count),
        WorkOrderAction.DONE: can_transition(current_status, WorkOrderStatus.DONE, photo_count),
    }
