"""
Discovery loop for ADS Connect.

This module provides the DiscoveryLoop class, the state machine tying the
console together:

    POLLING -> NO_TARGETS | HAS_TARGETS -> AWAITING_SELECTION -> DISPATCHING -> POLLING

Each cycle polls the route provider, redraws the table only when the
snapshot changed, waits for bounded operator input and, when a device is
selected, classifies it, shows its menu and dispatches the chosen action.
The only state carried between cycles is the fingerprint of the table on
screen, passed explicitly as a LoopState value.
"""

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple

from .data_models import DiscoverySnapshot, DispatchResult
from .device_classifier import DeviceClassifier
from .dispatcher import ConnectionDispatcher
from .snapshot import build_snapshot, should_redraw
from ..providers.base_provider import BaseRouteProvider
from ..utils.error_handler import ErrorContext, ErrorHandler, ErrorSeverity, ErrorType, ToolMissingError
from ..utils.input_reader import EXIT, REFRESH, TimeoutInputReader
from ..utils.logger import Logger, get_logger
from ..utils.renderer import ConsoleRenderer


class LoopPhase(Enum):
    """Phases of one discovery cycle."""
    POLLING = "polling"
    NO_TARGETS = "no_targets"
    HAS_TARGETS = "has_targets"
    AWAITING_SELECTION = "awaiting_selection"
    DISPATCHING = "dispatching"
    EXITING = "exiting"


@dataclass(frozen=True)
class LoopState:
    """
    State carried from one cycle to the next.

    Attributes:
        fingerprint: Fingerprint of the table currently on screen, None when
                     the screen shows anything else and must be redrawn
        phase: Phase the previous cycle ended in
        last_result: Outcome of the most recent dispatch, if any
    """
    fingerprint: Optional[str] = None
    phase: LoopPhase = LoopPhase.POLLING
    last_result: Optional[DispatchResult] = None

    def invalidated(self, phase: LoopPhase) -> "LoopState":
        return replace(self, fingerprint=None, phase=phase)


class DiscoveryLoop:
    """
    Interactive poll/select/dispatch loop.

    Provider failures never stop the loop; they are reported and treated as
    an empty poll. Only the operator typing "exit" ends it.
    """

    def __init__(
        self,
        provider: BaseRouteProvider,
        classifier: DeviceClassifier,
        renderer: ConsoleRenderer,
        reader: TimeoutInputReader,
        dispatcher: ConnectionDispatcher,
        timeout_seconds: float = 10,
        message_pause_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.provider = provider
        self.classifier = classifier
        self.renderer = renderer
        self.reader = reader
        self.dispatcher = dispatcher
        self.timeout_seconds = timeout_seconds
        self.message_pause_seconds = message_pause_seconds
        self.sleep = sleep
        self.logger = logger or get_logger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def run(self) -> int:
        """
        Run until the operator exits.

        Returns:
            int: Exit code (0)
        """
        state = LoopState()
        running = True
        while running:
            state, running = self.step(state)
        self.logger.info("Exiting ADS Connect")
        return 0

    def step(self, state: LoopState) -> Tuple[LoopState, bool]:
        """
        Execute one discovery cycle.

        Args:
            state: State left by the previous cycle

        Returns:
            Tuple of (new state, keep running)
        """
        snapshot = self.poll()
        if len(snapshot) == 0:
            return self._no_targets(state)
        return self._has_targets(state, snapshot)

    def poll(self) -> DiscoverySnapshot:
        """Query the provider; failures yield an empty snapshot."""
        try:
            records = self.provider.list_routes()
            local_id = self.provider.local_network_id()
        except ToolMissingError as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.TOOL_MISSING_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="list_routes",
                component=type(self.provider).__name__,
                additional_info={"tool_name": e.tool_name},
            ))
            return DiscoverySnapshot()
        except Exception as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.PROVIDER_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="list_routes",
                component=type(self.provider).__name__,
            ))
            return DiscoverySnapshot()
        return build_snapshot(records, local_id)

    def _no_targets(self, state: LoopState) -> Tuple[LoopState, bool]:
        self.renderer.render_no_targets(self.timeout_seconds)
        answer = self.reader.read_line(self.timeout_seconds, allow_empty_as_refresh=True)
        if answer.lower() == EXIT:
            return replace(state, phase=LoopPhase.EXITING), False
        if answer and answer != REFRESH:
            self.logger.debug(f"Ignoring input '{answer}' while no targets are listed")
        return state.invalidated(LoopPhase.NO_TARGETS), True

    def _has_targets(self, state: LoopState, snapshot: DiscoverySnapshot) -> Tuple[LoopState, bool]:
        redraw, fingerprint = should_redraw(state.fingerprint, snapshot)
        if redraw:
            self.renderer.render_table(snapshot, self.timeout_seconds)
        state = replace(state, fingerprint=fingerprint, phase=LoopPhase.HAS_TARGETS)

        answer = self.reader.read_line(self.timeout_seconds)
        if not answer:
            return state, True
        if answer.lower() == EXIT:
            return replace(state, phase=LoopPhase.EXITING), False

        # The snapshot resolved here is the one on screen: nothing is polled
        # between rendering and reading.
        device = snapshot.resolve(int(answer)) if answer.isdecimal() else None
        if device is None:
            self._reject_input("select_device", answer)
            self._report(f"Invalid selection '{answer}'. Enter a number between 1 and {len(snapshot)}.")
            return state.invalidated(LoopPhase.HAS_TARGETS), True

        return self._awaiting_selection(state, device)

    def _awaiting_selection(self, state: LoopState, device) -> Tuple[LoopState, bool]:
        profile = self.classifier.classify(device)
        if not profile.recognized:
            self.error_handler.handle_error(
                ValueError(f"unsupported device type '{device.os_tag}'"),
                ErrorContext(
                    error_type=ErrorType.CLASSIFICATION_ERROR,
                    severity=ErrorSeverity.LOW,
                    operation="classify",
                    component="DeviceClassifier",
                ),
            )
            self._report(f"{device.name}: unsupported device type '{device.os_tag}'.")
            return state.invalidated(LoopPhase.AWAITING_SELECTION), True

        self.renderer.render_menu(device, profile)
        choice = self.reader.read_line(self.timeout_seconds)
        if choice.lower() == EXIT:
            return replace(state, phase=LoopPhase.EXITING), False
        if profile.action_for_choice(choice) is None:
            self._reject_input("select_action", choice)
            self._report(f"Invalid choice '{choice}'." if choice else "No action selected.")
            return state.invalidated(LoopPhase.AWAITING_SELECTION), True

        return self._dispatching(state, device, profile, choice)

    def _dispatching(self, state: LoopState, device, profile, choice: str) -> Tuple[LoopState, bool]:
        result = self.dispatcher.dispatch(device, profile, choice)
        warnings = result.warnings
        for warning in warnings:
            self.renderer.render_warning(warning)
        if result.fallback_from is not None:
            self.renderer.render_info(
                f"'{result.fallback_from.label}' replaced by '{result.action.label}'."
            )
        if warnings:
            self.sleep(self.message_pause_seconds)

        state = state.invalidated(LoopPhase.DISPATCHING)
        return replace(state, last_result=result), True

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question through the renderer and input reader."""
        self.renderer.render_prompt(prompt)
        answer = self.reader.read_line(self.timeout_seconds)
        return answer.strip().lower() in ("y", "yes")

    def _reject_input(self, operation: str, answer: str) -> None:
        self.error_handler.handle_error(
            ValueError(f"invalid input '{answer}'"),
            ErrorContext(
                error_type=ErrorType.INPUT_ERROR,
                severity=ErrorSeverity.LOW,
                operation=operation,
                component="DiscoveryLoop",
            ),
        )

    def _report(self, message: str) -> None:
        self.renderer.render_warning(message)
        self.sleep(self.message_pause_seconds)
