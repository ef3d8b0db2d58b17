from typing import List, Tuple

import pytest

from grid_pursuit.actions import Direction
from grid_pursuit.components import Position
from grid_pursuit.errors import OutOfRange
from grid_pursuit.systems.movement import MovementExecutor
from grid_pursuit.types import AdvanceResult, EntityID, MoveResult, Phase
from tests.test_utils import make_grid, occupied_cells, walk_to_end

ENTITY: EntityID = 1
OTHER: EntityID = 2


def make_executor(
    start: Tuple[int, int] = (0, 0),
    obstacles: List[Tuple[int, int]] | None = None,
    move_speed: float = 5.0,
) -> MovementExecutor:
    grid = make_grid(obstacles=obstacles or [])
    return MovementExecutor(ENTITY, grid, Position(*start), move_speed=move_speed)


def test_construction_occupies_start_cell() -> None:
    executor = make_executor((3, 3))
    grid = executor.grid
    assert grid.get_occupant(3, 3) == ENTITY
    assert executor.phase == Phase.IDLE
    assert executor.anchor == pytest.approx(
        (grid.world_anchor(3, 3)[0], 0.5, grid.world_anchor(3, 3)[2])
    )


def test_construction_on_blocked_cell_rejected() -> None:
    grid = make_grid(obstacles=[(1, 1)], occupants={(2, 2): OTHER})
    with pytest.raises(ValueError):
        MovementExecutor(ENTITY, grid, Position(1, 1))
    with pytest.raises(ValueError):
        MovementExecutor(ENTITY, grid, Position(2, 2))
    with pytest.raises(OutOfRange):
        MovementExecutor(ENTITY, grid, Position(10, 0))


def test_move_request_stores_path_without_current_cell() -> None:
    executor = make_executor((0, 0))
    assert executor.move_request(Position(0, 3)) == MoveResult.OK
    state = executor.state
    assert state.phase == Phase.MOVING
    assert state.cursor == 0
    assert list(state.path) == [Position(0, 1), Position(0, 2), Position(0, 3)]
    assert state.next_cell == Position(0, 1)


def test_move_request_to_current_cell_is_noop() -> None:
    executor = make_executor((4, 4))
    before = executor.state
    assert executor.move_request(Position(4, 4)) == MoveResult.OK
    assert executor.state == before
    assert executor.phase == Phase.IDLE


def test_move_request_while_moving_is_busy_and_leaves_state() -> None:
    executor = make_executor((0, 0))
    executor.move_request(Position(0, 5))
    executor.advance(1.0)
    before = executor.state
    assert executor.move_request(Position(5, 5)) == MoveResult.BUSY
    assert executor.state.path == before.path
    assert executor.state.cursor == before.cursor == 1


def test_move_request_to_blocked_target_is_no_path() -> None:
    executor = make_executor((0, 0), obstacles=[(2, 2)])
    before = executor.state
    assert executor.move_request(Position(2, 2)) == MoveResult.NO_PATH
    assert executor.state == before


def test_move_request_out_of_range_raises() -> None:
    executor = make_executor((0, 0))
    with pytest.raises(OutOfRange):
        executor.move_request(Position(0, 10))


def test_single_transition_moves_occupancy_exactly_once() -> None:
    executor = make_executor((0, 0))
    grid = executor.grid
    executor.move_request(Position(0, 2))
    assert executor.arrive() == AdvanceResult.ARRIVED
    assert occupied_cells(grid, ENTITY) == [Position(0, 1)]
    assert grid.get_occupant(0, 0) is None
    assert executor.position == Position(0, 1)
    assert executor.state.cursor == 1
    assert executor.phase == Phase.MOVING
    assert executor.state.remaining == 1


def test_large_steps_arrive_one_cell_per_tick() -> None:
    executor = make_executor((0, 0))
    executor.move_request(Position(3, 0))
    assert walk_to_end(executor, step=10.0) == [AdvanceResult.ARRIVED] * 3
    assert executor.position == Position(3, 0)
    assert executor.phase == Phase.IDLE
    assert len(executor.state.path) == 0
    assert occupied_cells(executor.grid, ENTITY) == [Position(3, 0)]


def test_small_steps_interpolate_before_arriving() -> None:
    # speed 5 * step 0.1 = 0.5 units per tick, cell pitch is 1.1
    executor = make_executor((0, 0))
    grid = executor.grid
    start_x = executor.anchor[0]
    executor.move_request(Position(1, 0))
    assert executor.advance(0.1) == AdvanceResult.STILL_MOVING
    assert executor.anchor[0] == pytest.approx(start_x + 0.5)
    assert executor.position == Position(0, 0)
    assert grid.get_occupant(0, 0) == ENTITY
    assert executor.advance(0.1) == AdvanceResult.STILL_MOVING
    assert executor.advance(0.1) == AdvanceResult.ARRIVED
    assert executor.anchor[0] == pytest.approx(grid.world_anchor(1, 0)[0])
    assert executor.advance(0.1) == AdvanceResult.IDLE


def test_every_path_cell_is_occupied_in_order() -> None:
    executor = make_executor((0, 0))
    grid = executor.grid
    executor.move_request(Position(2, 2))
    expected = list(executor.state.path)
    visited: List[Position] = []
    while executor.advance(1.0) != AdvanceResult.IDLE:
        assert len(occupied_cells(grid, ENTITY)) == 1
        visited.append(executor.position)
    assert visited == expected


@pytest.mark.parametrize(
    "target, facing",
    [
        ((2, 3), Direction.UP),
        ((2, 1), Direction.DOWN),
        ((1, 2), Direction.LEFT),
        ((3, 2), Direction.RIGHT),
    ],
)
def test_facing_follows_step_direction(target: Tuple[int, int], facing: Direction) -> None:
    executor = make_executor((2, 2))
    executor.move_request(Position(*target))
    executor.advance(0.05)
    assert executor.facing == facing


def test_stop_keeps_last_confirmed_cell() -> None:
    executor = make_executor((0, 0))
    grid = executor.grid
    executor.move_request(Position(0, 4))
    executor.advance(1.0)
    executor.advance(0.1)
    executor.stop()
    assert executor.phase == Phase.IDLE
    assert len(executor.state.path) == 0
    assert executor.position == Position(0, 1)
    assert occupied_cells(grid, ENTITY) == [Position(0, 1)]
    assert executor.advance(1.0) == AdvanceResult.IDLE
    assert executor.move_request(Position(0, 3)) == MoveResult.OK


def test_settled_listeners_fire_on_completion_and_stop() -> None:
    executor = make_executor((0, 0))
    events: List[Tuple[EntityID, Position]] = []
    unsubscribe = executor.subscribe(lambda eid, pos: events.append((eid, pos)))

    executor.move_request(Position(0, 2))
    assert executor.advance(10.0) == AdvanceResult.ARRIVED
    assert events == []
    executor.advance(10.0)
    assert events == [(ENTITY, Position(0, 2))]

    executor.move_request(Position(3, 2))
    executor.advance(10.0)
    executor.stop()
    assert events[-1] == (ENTITY, Position(1, 2))

    executor.stop()
    unsubscribe()
    executor.move_request(Position(1, 0))
    walk_to_end(executor, 10.0)
    assert len(events) == 2


def test_committed_path_is_not_replanned() -> None:
    executor = make_executor((0, 0))
    grid = executor.grid
    executor.move_request(Position(0, 3))
    grid.set_obstacle(0, 2, True)
    walk_to_end(executor, 10.0)
    assert executor.position == Position(0, 3)


def test_place_moves_occupancy() -> None:
    executor = make_executor((0, 0))
    grid = executor.grid
    events: List[Tuple[EntityID, Position]] = []
    executor.subscribe(lambda eid, pos: events.append((eid, pos)))
    executor.place(Position(7, 7))
    assert occupied_cells(grid, ENTITY) == [Position(7, 7)]
    assert executor.anchor[0] == pytest.approx(grid.world_anchor(7, 7)[0])
    assert events == [(ENTITY, Position(7, 7))]


def test_place_rejections() -> None:
    executor = make_executor((0, 0), obstacles=[(5, 5)])
    executor.grid.set_occupant(6, 6, OTHER)
    with pytest.raises(ValueError):
        executor.place(Position(5, 5))
    with pytest.raises(ValueError):
        executor.place(Position(6, 6))
    with pytest.raises(OutOfRange):
        executor.place(Position(-1, 0))
    executor.move_request(Position(0, 3))
    with pytest.raises(ValueError):
        executor.place(Position(2, 2))


def test_negative_step_rejected() -> None:
    with pytest.raises(ValueError):
        make_executor().advance(-0.1)


def test_non_positive_speed_rejected() -> None:
    with pytest.raises(ValueError):
        make_executor(move_speed=0.0)


def test_silent_stop_skips_listeners() -> None:
    executor = make_executor((0, 0))
    events: List[Tuple[EntityID, Position]] = []
    executor.subscribe(lambda eid, pos: events.append((eid, pos)))
    executor.move_request(Position(0, 3))
    executor.advance(10.0)
    executor.stop(notify=False)
    assert executor.phase == Phase.IDLE
    assert executor.position == Position(0, 1)
    assert events == []
    executor.place(Position(4, 4))
    assert events == [(ENTITY, Position(4, 4))]
