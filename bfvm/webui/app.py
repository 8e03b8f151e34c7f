from __future__ import annotations

from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from bfvm.bf_interpreter import ExecutionState
from bfvm.builder import compile_program
from bfvm.config import DEFAULT_TAPE_WINDOW
from bfvm.debugger import DebugSession
from bfvm.errors import StepLimitExceeded, UnmatchedBracket
from bfvm.program import LOOP_KINDS, Program

from .session import SessionStore


class ProgramRequest(BaseModel):
    code: str
    optimize: bool = False


class SessionRequest(ProgramRequest):
    input: str = ""
    strict_wrap: bool = False
    max_steps: Optional[int] = Field(default=None, ge=1)
    tape_window: int = Field(default=DEFAULT_TAPE_WINDOW, ge=0)
    trace_size: int = Field(default=200, ge=1)


class AdvanceRequest(BaseModel):
    # None runs until a breakpoint or the end of the program
    count: Optional[int] = Field(default=1, ge=1)
    ignore_breakpoints: bool = False


class BreakpointRequest(BaseModel):
    index: Optional[int] = Field(default=None, ge=0)
    position: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def exactly_one_target(self) -> "BreakpointRequest":
        if (self.index is None) == (self.position is None):
            raise ValueError("give exactly one of 'index' or 'position'")
        return self


class InstructionView(BaseModel):
    index: int
    kind: str
    operand: int
    position: int
    text: str
    partner: Optional[int] = None


class ProgramView(BaseModel):
    optimized: bool
    instructions: List[InstructionView]

    @classmethod
    def of(cls, program: Program) -> "ProgramView":
        return cls(
            optimized=program.optimized,
            instructions=[
                InstructionView(
                    index=index,
                    kind=instruction.kind.value,
                    operand=instruction.operand,
                    position=instruction.position,
                    text=str(instruction),
                    partner=instruction.operand if instruction.kind in LOOP_KINDS else None,
                )
                for index, instruction in enumerate(program)
            ],
        )


class StateView(BaseModel):
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: str

    @classmethod
    def of(cls, state: ExecutionState) -> "StateView":
        return cls(
            step=state.step,
            pc=state.pc,
            command=state.command,
            pointer=state.pointer,
            tape_start=state.tape_start,
            tape=list(state.tape),
            output=state.output,
        )


class BreakpointView(BaseModel):
    index: int
    position: int


class SessionView(BaseModel):
    session_id: str
    state: StateView
    finished: bool
    stopped_at: Optional[int]
    breakpoints: List[BreakpointView]
    loops: List[List[int]]

    @classmethod
    def of(cls, session_id: str, session: DebugSession) -> "SessionView":
        return cls(
            session_id=session_id,
            state=StateView.of(session.state),
            finished=session.finished,
            stopped_at=session.stopped_at,
            breakpoints=[
                BreakpointView(index=index, position=position)
                for index, position in sorted(session.breakpoints.items())
            ],
            loops=[list(pair) for pair in session.loops()],
        )


class AdvanceView(SessionView):
    states: List[StateView]


def create_app(store: Optional[SessionStore] = None) -> FastAPI:
    sessions = store if store is not None else SessionStore()
    app = FastAPI(title="bfvm debugger API", version="0.1.0")

    @app.exception_handler(UnmatchedBracket)
    def unmatched_bracket(request: Request, exc: UnmatchedBracket) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "index": exc.index, "position": exc.position},
        )

    @app.exception_handler(StepLimitExceeded)
    def step_limit(request: Request, exc: StepLimitExceeded) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    def lookup(session_id: str) -> DebugSession:
        try:
            return sessions.get(session_id)
        except KeyError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown session id: {session_id}",
            ) from exc

    @app.post("/api/programs", response_model=ProgramView)
    def compile_listing(request: ProgramRequest) -> ProgramView:
        return ProgramView.of(compile_program(request.code, fold=request.optimize))

    @app.post("/api/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
    def open_session(request: SessionRequest) -> SessionView:
        session_id, session = sessions.add(
            DebugSession(
                code=request.code,
                input_data=request.input,
                optimize=request.optimize,
                strict_wrap=request.strict_wrap,
                max_steps=request.max_steps,
                tape_window=request.tape_window,
                trace_size=request.trace_size,
            )
        )
        return SessionView.of(session_id, session)

    @app.get("/api/sessions/{session_id}", response_model=SessionView)
    def show_session(session_id: str, session: DebugSession = Depends(lookup)) -> SessionView:
        return SessionView.of(session_id, session)

    @app.get("/api/sessions/{session_id}/program", response_model=ProgramView)
    def show_program(session: DebugSession = Depends(lookup)) -> ProgramView:
        return ProgramView.of(session.program)

    @app.get("/api/sessions/{session_id}/trace", response_model=List[StateView])
    def show_trace(session: DebugSession = Depends(lookup)) -> List[StateView]:
        return [StateView.of(state) for state in session.trace]

    @app.post("/api/sessions/{session_id}/advance", response_model=AdvanceView)
    def advance(
        session_id: str,
        request: AdvanceRequest,
        session: DebugSession = Depends(lookup),
    ) -> AdvanceView:
        states = session.advance(request.count, honor_breakpoints=not request.ignore_breakpoints)
        view = SessionView.of(session_id, session)
        return AdvanceView(**view.model_dump(), states=[StateView.of(state) for state in states])

    @app.post("/api/sessions/{session_id}/rewind", response_model=SessionView)
    def rewind(session_id: str, session: DebugSession = Depends(lookup)) -> SessionView:
        session.rewind()
        return SessionView.of(session_id, session)

    @app.post("/api/sessions/{session_id}/breakpoints", response_model=SessionView)
    def set_breakpoint(
        session_id: str,
        request: BreakpointRequest,
        session: DebugSession = Depends(lookup),
    ) -> SessionView:
        try:
            if request.index is not None:
                session.break_at(request.index)
            else:
                session.break_at_source(request.position)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return SessionView.of(session_id, session)

    @app.delete("/api/sessions/{session_id}/breakpoints/{index}", response_model=SessionView)
    def clear_breakpoint(
        session_id: str,
        index: int,
        session: DebugSession = Depends(lookup),
    ) -> SessionView:
        if not session.clear_breakpoint(index):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No breakpoint at instruction {index}",
            )
        return SessionView.of(session_id, session)

    @app.delete("/api/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    def close_session(session_id: str) -> Response:
        if not sessions.discard(session_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown session id: {session_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
