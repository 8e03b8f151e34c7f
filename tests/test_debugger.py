import unittest

from bfvm import DebugSession, UnmatchedLoopOpen, compile_program
from bfvm.debugger import enclosing_loops, instruction_at
from bfvm.errors import StepLimitExceeded


class InstructionAtTests(unittest.TestCase):
    def test_folded_runs_cover_their_whole_span(self) -> None:
        program = compile_program("+++ >>.", fold=True)
        self.assertEqual(
            [instruction_at(program, position) for position in range(7)],
            [0, 0, 0, 0, 1, 1, 2],
        )

    def test_unit_step_maps_one_to_one(self) -> None:
        program = compile_program("+a+")
        self.assertEqual(instruction_at(program, 0), 0)
        self.assertEqual(instruction_at(program, 1), 0)
        self.assertEqual(instruction_at(program, 2), 1)

    def test_position_before_first_instruction(self) -> None:
        with self.assertRaises(ValueError):
            instruction_at(compile_program("  +"), 0)
        with self.assertRaises(ValueError):
            instruction_at(compile_program(""), 0)


class EnclosingLoopTests(unittest.TestCase):
    def test_nesting_outermost_first(self) -> None:
        program = compile_program("+[>[-]<]")
        self.assertEqual(enclosing_loops(program, 4), [(1, 7), (3, 5)])
        self.assertEqual(enclosing_loops(program, 5), [(1, 7), (3, 5)])
        self.assertEqual(enclosing_loops(program, 7), [(1, 7)])

    def test_outside_any_loop(self) -> None:
        program = compile_program("+[>[-]<]")
        self.assertEqual(enclosing_loops(program, 1), [])
        self.assertEqual(enclosing_loops(program, 8), [])


class DebugSessionTests(unittest.TestCase):
    def test_initial_state(self) -> None:
        session = DebugSession("+.")
        self.assertEqual(session.state.step, 0)
        self.assertIsNone(session.state.command)
        self.assertEqual(len(session.trace), 1)
        self.assertFalse(session.finished)

    def test_advance_counts_instructions(self) -> None:
        session = DebugSession("+++.", optimize=True)
        states = session.advance(1)
        self.assertEqual([state.command for state in states], ["+3"])
        self.assertEqual(session.state.pc, 1)
        self.assertFalse(session.finished)

    def test_advance_to_end(self) -> None:
        session = DebugSession("++++++++[>++++++++<-]>.", optimize=True)
        states = session.advance(None)
        self.assertTrue(session.finished)
        self.assertIsNone(states[-1].command)
        self.assertEqual(session.state.output, "@")
        self.assertEqual(session.advance(5), [])

    def test_breakpoint_from_source_position_in_folded_program(self) -> None:
        session = DebugSession("+++>>.", optimize=True)
        self.assertEqual(session.break_at_source(4), 1)
        self.assertEqual(session.breakpoints, {1: 3})
        states = session.advance(None)
        self.assertEqual(session.stopped_at, 1)
        self.assertEqual([state.command for state in states], ["+3"])
        self.assertFalse(session.finished)

    def test_breakpoint_from_source_position_in_unit_program(self) -> None:
        session = DebugSession("+++>>.")
        self.assertEqual(session.break_at_source(4), 4)
        session.advance(None)
        self.assertEqual(session.state.pc, 4)
        self.assertEqual(session.state.step, 4)

    def test_breakpoint_inside_loop_stops_each_iteration(self) -> None:
        session = DebugSession("+++[-]")
        session.break_at(4)
        for expected_cell in (3, 2, 1):
            session.advance(None)
            self.assertEqual(session.stopped_at, 4)
            self.assertEqual(session.state.tape[session.state.pointer - session.state.tape_start], expected_cell)
        self.assertEqual(session.loops(), [(3, 5)])

    def test_ignoring_breakpoints(self) -> None:
        session = DebugSession("+.+")
        session.break_at(1)
        session.advance(None, honor_breakpoints=False)
        self.assertTrue(session.finished)
        self.assertIsNone(session.stopped_at)

    def test_breakpoint_validation(self) -> None:
        session = DebugSession("+.")
        with self.assertRaises(ValueError):
            session.break_at(2)
        with self.assertRaises(ValueError):
            session.break_at_source(2)
        self.assertFalse(session.clear_breakpoint(0))
        session.break_at(0)
        self.assertTrue(session.clear_breakpoint(0))

    def test_trace_is_bounded(self) -> None:
        session = DebugSession("+++++.", trace_size=3)
        session.advance(5)
        self.assertEqual(len(session.trace), 3)
        self.assertIs(session.trace[-1], session.state)
        self.assertEqual(session.trace[0].step, 3)

    def test_rewind_keeps_breakpoints(self) -> None:
        session = DebugSession(",.", input_data="B")
        session.break_at(1)
        session.advance(None)
        session.advance(None)
        self.assertEqual(session.state.output, "B")
        session.rewind()
        self.assertEqual(session.state.step, 0)
        self.assertFalse(session.finished)
        self.assertEqual(session.breakpoints, {1: 1})
        session.advance(None, honor_breakpoints=False)
        self.assertEqual(session.state.output, "B")

    def test_strict_wrap(self) -> None:
        session = DebugSession("+" * 255, optimize=True, strict_wrap=True, tape_window=0)
        session.advance(None)
        self.assertEqual(session.state.tape, [255])

    def test_step_limit_finishes_session(self) -> None:
        session = DebugSession("+[]", max_steps=2)
        with self.assertRaises(StepLimitExceeded):
            session.advance(None)
        self.assertTrue(session.finished)

    def test_malformed_program(self) -> None:
        with self.assertRaises(UnmatchedLoopOpen):
            DebugSession("[")


if __name__ == "__main__":
    unittest.main()
