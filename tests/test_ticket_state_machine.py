import itertools

import pytest

from apps.helpdesk.tickets.errors import InvalidTicketTransitionError
from apps.helpdesk.tickets.state import TicketStateMachine, TicketStatus

ALLOWED = {
    (TicketStatus.OPEN, TicketStatus.IN_PROGRESS),
    (TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED),
    (TicketStatus.RESOLVED, TicketStatus.CLOSED),
}


def test_ticket_state_machine_allows_expected_transitions():
    machine = TicketStateMachine()
    assert machine.can_transition(TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
    assert machine.can_transition(TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED)
    assert machine.can_transition(TicketStatus.RESOLVED, TicketStatus.CLOSED)


@pytest.mark.parametrize(
    ("current", "requested"),
    [
        (TicketStatus.OPEN, TicketStatus.RESOLVED),
        (TicketStatus.OPEN, TicketStatus.CLOSED),
        (TicketStatus.IN_PROGRESS, TicketStatus.OPEN),
        (TicketStatus.RESOLVED, TicketStatus.IN_PROGRESS),
        (TicketStatus.CLOSED, TicketStatus.OPEN),
        (TicketStatus.CLOSED, TicketStatus.CLOSED),
        (TicketStatus.OPEN, TicketStatus.OPEN),
    ],
)
def test_ticket_state_machine_blocks_invalid_transitions(current, requested):
    machine = TicketStateMachine()
    assert not machine.can_transition(current, requested)
    with pytest.raises(InvalidTicketTransitionError) as exc:
        machine.assert_transition(current, requested)
    assert exc.value.current == current
    assert exc.value.requested == requested


def test_only_the_designated_successor_is_accepted_for_every_pair():
    machine = TicketStateMachine()
    for current, requested in itertools.product(TicketStatus, repeat=2):
        assert machine.can_transition(current, requested) == ((current, requested) in ALLOWED)


def test_closed_is_the_only_terminal_state():
    machine = TicketStateMachine()
    assert machine.initial_state() == TicketStatus.OPEN
    assert machine.successor(TicketStatus.CLOSED) is None
    assert [status for status in TicketStatus if machine.is_terminal(status)] == [TicketStatus.CLOSED]


def test_transition_table_can_be_replaced():
    shortened = TicketStateMachine(
        {
            TicketStatus.OPEN: TicketStatus.RESOLVED,
            TicketStatus.RESOLVED: None,
        }
    )
    assert shortened.can_transition(TicketStatus.OPEN, TicketStatus.RESOLVED)
    assert not shortened.can_transition(TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
    assert shortened.is_terminal(TicketStatus.RESOLVED)


def test_empty_transition_table_is_kept():
    frozen = TicketStateMachine({})
    assert all(frozen.is_terminal(status) for status in TicketStatus)
    assert not frozen.can_transition(TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
