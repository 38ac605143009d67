"""
Launch Director
---------------
Decides, once per launch, which screen the host renders: the native cooking
UI, the remote web experience, or the offline screen.

Inputs arrive as events (attribution, deeplink, connectivity, push-permission
answers, push opens). Every public `on_*` method only posts a task onto the
dispatcher; the `_handle_*` methods run serialized and are the only code that
mutates director state or the persisted LaunchStore.

Evaluation order for an attribution event (first match wins):
  1. empty accumulated payload   -> saved destination, else CLASSIC_FLOW
  2. persisted mode Classic      -> CLASSIC_FLOW
     persisted mode Remote       -> temp or saved destination, else CLASSIC_FLOW
  3. first run + Organic         -> organic validation after a delay
  4. one-shot temp destination   -> WEB_EXPERIENCE (destination consumed)
  5. nothing resolved yet        -> push prompt (unless resolved / cooling down),
                                    then remote config
"""
from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional

from launchpad.core import stages
from launchpad.core.collaborators import AttributionSource, PermissionRequester, PushTokenProvider
from launchpad.core.dispatch import Dispatcher, SerialDispatcher, TimerHandle
from launchpad.observability.logging import log
from launchpad.remote.config_client import ConfigService
from launchpad.remote.connectivity import ConnectivityMonitor
from launchpad.remote.organic import OrganicValidator
from launchpad.remote.payloads import ConfigResult, build_config_request, merge_attribution
from launchpad.settings import settings
from launchpad.store.launch_state import LaunchStore
from launchpad.store.models import PresentationState

ORGANIC_STATUS = "Organic"

Listener = Callable[[PresentationState], None]


class LaunchDirector:
    def __init__(
        self,
        store: LaunchStore,
        *,
        attribution_source: AttributionSource,
        config_service: ConfigService,
        organic_validator: OrganicValidator,
        permission_requester: Optional[PermissionRequester] = None,
        connectivity: Optional[ConnectivityMonitor] = None,
        push_token_provider: Optional[PushTokenProvider] = None,
        dispatcher: Optional[Dispatcher] = None,
        clock: Callable[[], float] = time.time,
        organic_delay_sec: Optional[float] = None,
        merge_timer_sec: Optional[float] = None,
        attribution_timeout_sec: Optional[float] = None,
        push_ask_cooldown_sec: Optional[float] = None,
    ):
        self.store = store
        self.attribution_source = attribution_source
        self.config_service = config_service
        self.organic_validator = organic_validator
        self.permission_requester = permission_requester
        self.connectivity = connectivity
        self.push_token_provider = push_token_provider
        self.dispatcher = dispatcher if dispatcher is not None else SerialDispatcher()
        self.clock = clock

        self.organic_delay_sec = float(settings.ORGANIC_DELAY_SEC if organic_delay_sec is None else organic_delay_sec)
        self.merge_timer_sec = float(settings.MERGE_TIMER_SEC if merge_timer_sec is None else merge_timer_sec)
        self.attribution_timeout_sec = float(
            settings.ATTRIBUTION_TIMEOUT_SEC if attribution_timeout_sec is None else attribution_timeout_sec
        )
        self.push_ask_cooldown_sec = float(
            settings.PUSH_ASK_COOLDOWN_SEC if push_ask_cooldown_sec is None else push_ask_cooldown_sec
        )

        # Presentation
        self.stage: str = stages.BOOTING
        self.destination: Optional[str] = None
        self.permission_prompt_visible: bool = False

        # In-memory attribution caches (owned by this instance only)
        self._attribution: Dict[str, Any] = {}
        self._attribution_done = False
        self._deeplink: Dict[str, Any] = {}
        self._accumulated: Dict[str, Any] = {}

        # Web destination to go back to when connectivity returns
        self._resume_destination: Optional[str] = None

        self._merge_timer: Optional[TimerHandle] = None
        self._attribution_timer: Optional[TimerHandle] = None
        self._organic_scheduled = False
        self._config_in_flight = False

        self._listeners: List[Listener] = []
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._started:
            return
        self._started = True
        if self.connectivity is not None:
            self.connectivity.start(self.on_connectivity)
        if self.attribution_timeout_sec > 0:
            self._attribution_timer = self.dispatcher.call_later(
                self.attribution_timeout_sec, self._handle_attribution_timeout
            )
        log(event="launch_director_started", stage=self.stage, appMode=self.store.app_mode or "")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.connectivity is not None:
            self.connectivity.stop()
        for t in (self._attribution_timer, self._merge_timer):
            if t is not None:
                t.cancel()
        self.dispatcher.stop()
        log(event="launch_director_closed", stage=self.stage)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def presentation(self) -> PresentationState:
        return PresentationState(
            stage=self.stage,
            destination=self.destination,
            permissionPromptVisible=self.permission_prompt_visible,
        )

    # ------------------------------------------------------------------
    # Event entry points (any thread)
    # ------------------------------------------------------------------
    def on_attribution(self, payload: Optional[Dict[str, Any]]) -> None:
        self.dispatcher.submit(self._handle_attribution, dict(payload or {}), "")

    def on_attribution_failed(self, reason: str = "") -> None:
        self.dispatcher.submit(self._handle_attribution, {}, reason or "failed")

    def on_deeplink(self, payload: Optional[Dict[str, Any]]) -> None:
        self.dispatcher.submit(self._handle_deeplink, dict(payload or {}))

    def on_connectivity(self, status: str) -> None:
        self.dispatcher.submit(self._handle_connectivity, status)

    def on_push_permission_answered(self, allowed: bool, os_granted: Optional[bool] = None) -> None:
        self.dispatcher.submit(self._handle_permission_answer, bool(allowed), os_granted)

    def on_push_opened(self, url: str) -> None:
        self.dispatcher.submit(self._handle_push_opened, url)

    # ------------------------------------------------------------------
    # Attribution / deeplink
    # ------------------------------------------------------------------
    def _handle_attribution(self, payload: Dict[str, Any], failure_reason: str) -> None:
        if self._attribution_done:
            log(event="attribution_duplicate_ignored", failed=bool(failure_reason))
            return
        self._attribution_done = True
        self._cancel_timer("_attribution_timer")
        self._cancel_timer("_merge_timer")

        self._attribution = payload
        self._accumulated = merge_attribution(self._attribution, self._deeplink)
        log(
            event="attribution_received" if not failure_reason else "attribution_failed",
            reason=failure_reason,
            keys=len(self._accumulated),
            afStatus=str(self._accumulated.get("af_status", "")),
        )
        self._evaluate(self._accumulated)

    def _handle_attribution_timeout(self) -> None:
        self._attribution_timer = None
        if self._attribution_done:
            return
        log(event="attribution_timeout", timeoutSec=self.attribution_timeout_sec)
        self._handle_attribution({}, "timeout")

    def _handle_deeplink(self, payload: Dict[str, Any]) -> None:
        self._deeplink.update(payload)
        had_timer = self._cancel_timer("_merge_timer")
        if self._attribution_done:
            # Folds into the cache for any later merge; evaluation already ran
            self._accumulated = merge_attribution(self._attribution, self._deeplink)
        elif not had_timer:
            self._merge_timer = self.dispatcher.call_later(self.merge_timer_sec, self._handle_merge_timer)
        log(event="deeplink_cached", keys=len(self._deeplink), attributionDone=self._attribution_done)

    def _handle_merge_timer(self) -> None:
        # Cache update only: no stage evaluation from here
        self._merge_timer = None
        self._accumulated = merge_attribution(self._attribution, self._deeplink)
        log(event="deeplink_merge_timer_fired", keys=len(self._accumulated))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def _evaluate(self, payload: Dict[str, Any], *, after_organic: bool = False) -> None:
        if self.stage == stages.CLASSIC_FLOW:
            log(event="evaluation_skipped_classic")
            return

        if not after_organic:
            if not payload:
                self._resolve_from_cache("empty_attribution")
                return

            if self.store.app_mode == stages.MODE_CLASSIC:
                log(event="evaluation_sticky_classic")
                self._transition(stages.CLASSIC_FLOW)
                return

            if self.store.app_mode == stages.MODE_REMOTE:
                self._resolve_sticky_remote()
                return

            if not self.store.has_ever_run_before and payload.get("af_status") == ORGANIC_STATUS:
                self._schedule_organic_validation()
                return

        temp = self.store.consume_temp_destination()
        if temp:
            log(event="evaluation_temp_destination")
            self._transition(stages.WEB_EXPERIENCE, temp)
            return

        if self.destination is not None:
            return

        if self.stage == stages.BOOTING and self._should_prompt_for_push():
            self._set_prompt(True)
            return

        self._request_remote_config()

    def _resolve_from_cache(self, reason: str) -> None:
        saved = self.store.saved_destination
        log(event="evaluation_from_cache", reason=reason, hasSaved=bool(saved))
        if saved:
            self._transition(stages.WEB_EXPERIENCE, saved)
        else:
            self._transition(stages.CLASSIC_FLOW)

    def _resolve_sticky_remote(self) -> None:
        # Remote was decided on an earlier launch: no remote config call here.
        # A pending push destination still wins over the saved one.
        target = self.store.consume_temp_destination() or self.store.saved_destination
        log(event="evaluation_sticky_remote", hasDestination=bool(target))
        if not target:
            self._transition(stages.CLASSIC_FLOW)
        elif self.stage == stages.OFFLINE_SCREEN:
            self._resume_destination = target
        else:
            self._transition(stages.WEB_EXPERIENCE, target)

    # ------------------------------------------------------------------
    # Organic validation
    # ------------------------------------------------------------------
    def _schedule_organic_validation(self) -> None:
        if self._organic_scheduled:
            return
        self._organic_scheduled = True
        log(event="organic_validation_scheduled", delaySec=self.organic_delay_sec)
        self.dispatcher.call_later(self.organic_delay_sec, self._start_organic_validation)

    def _start_organic_validation(self) -> None:
        source = self.attribution_source
        validator = self.organic_validator
        self.dispatcher.run_in_background(
            lambda: validator.validate(source.device_id()),
            self._on_organic_done,
        )

    def _on_organic_done(self, result: Optional[Dict[str, Any]], error: Optional[BaseException]) -> None:
        if error is not None:
            log(event="organic_validation_failed", errorType=type(error).__name__, error=str(error)[:300])
            self._transition(stages.CLASSIC_FLOW)
            return
        merged = merge_attribution(result, self._deeplink)
        self._accumulated = merged
        self._evaluate(merged, after_organic=True)

    # ------------------------------------------------------------------
    # Push permission
    # ------------------------------------------------------------------
    def _should_prompt_for_push(self) -> bool:
        if self.store.accepted_notifications or self.store.declined_notifications_permanently:
            return False
        last = self.store.last_notification_ask_ts
        if last is not None and (self.clock() - last) < self.push_ask_cooldown_sec:
            log(event="push_prompt_cooldown", secondsSinceAsk=int(self.clock() - last))
            return False
        return True

    def _set_prompt(self, visible: bool) -> None:
        if self.permission_prompt_visible == visible:
            return
        self.permission_prompt_visible = visible
        log(event="push_prompt_shown" if visible else "push_prompt_hidden")
        self._notify()

    def _handle_permission_answer(self, allowed: bool, os_granted: Optional[bool]) -> None:
        if not allowed:
            self.store.mark_notification_asked(self.clock())
            log(event="push_permission_declined")
            self._set_prompt(False)
            self._request_remote_config()
            return

        if os_granted is not None:
            self._on_os_permission(bool(os_granted), None)
            return
        requester = self.permission_requester
        if requester is None:
            self._on_os_permission(False, RuntimeError("no permission requester"))
            return
        self.dispatcher.run_in_background(requester.request, self._on_os_permission)

    def _on_os_permission(self, granted: Any, error: Optional[BaseException]) -> None:
        if error is not None:
            # No OS answer: only the ask cooldown applies, the prompt may come back later
            self.store.mark_notification_asked(self.clock())
            log(event="push_permission_request_failed", errorType=type(error).__name__, error=str(error)[:200])
        else:
            granted = bool(granted)
            self.store.accepted_notifications = granted
            if not granted:
                self.store.declined_notifications_permanently = True
            log(event="push_permission_resolved", granted=granted)
        self._set_prompt(False)
        self._request_remote_config()

    # ------------------------------------------------------------------
    # Remote config
    # ------------------------------------------------------------------
    def _request_remote_config(self) -> None:
        if self._config_in_flight:
            return
        self._config_in_flight = True
        payload = dict(self._accumulated)
        source = self.attribution_source
        token_provider = self.push_token_provider
        service = self.config_service

        def _fetch() -> ConfigResult:
            request = build_config_request(
                payload,
                device_id=source.device_id(),
                push_token=token_provider() if token_provider is not None else None,
            )
            return service.fetch(request)

        log(event="remote_config_requested", keys=len(payload))
        self.dispatcher.run_in_background(_fetch, self._on_config_done)

    def _on_config_done(self, result: Optional[ConfigResult], error: Optional[BaseException]) -> None:
        self._config_in_flight = False
        if error is None and result is not None:
            self.store.save_destination(result.url, result.expires)
            self.store.app_mode = stages.MODE_REMOTE
            self.store.has_ever_run_before = True
            self._transition(stages.WEB_EXPERIENCE, result.url)
            return

        log(
            event="remote_config_failed",
            errorType=type(error).__name__ if error is not None else "",
            reason=getattr(error, "reason", str(error or ""))[:300],
        )
        saved = self.store.saved_destination
        if saved:
            if self.stage == stages.OFFLINE_SCREEN:
                self._resume_destination = saved
                return
            self._transition(stages.WEB_EXPERIENCE, saved)
            return
        self.store.app_mode = stages.MODE_CLASSIC
        self.store.has_ever_run_before = True
        self._transition(stages.CLASSIC_FLOW)

    # ------------------------------------------------------------------
    # Connectivity / push open
    # ------------------------------------------------------------------
    def _handle_connectivity(self, status: str) -> None:
        if status == stages.CONNECTIVITY_LOST:
            if self.store.app_mode == stages.MODE_REMOTE:
                if self.stage != stages.OFFLINE_SCREEN:
                    self._transition(stages.OFFLINE_SCREEN)
            elif self.stage != stages.CLASSIC_FLOW:
                self._transition(stages.CLASSIC_FLOW)
            return

        if status == stages.CONNECTIVITY_RESTORED:
            if self.stage == stages.OFFLINE_SCREEN:
                self._recover_from_offline()
            return

        log(event="connectivity_unknown_status", status=str(status))

    def _recover_from_offline(self) -> None:
        target = self._resume_destination or self.store.saved_destination
        log(event="offline_recovery", hasDestination=bool(target), attributionDone=self._attribution_done)
        if target:
            self._transition(stages.WEB_EXPERIENCE, target)
        elif self._attribution_done:
            self._request_remote_config()
        # Otherwise the pending attribution event drives evaluation

    def _handle_push_opened(self, url: str) -> None:
        url = (url or "").strip()
        if not url:
            return
        if self.stage == stages.WEB_EXPERIENCE:
            log(event="push_opened_navigate")
            self._transition(stages.WEB_EXPERIENCE, url)
            return
        self.store.set_temp_destination(url)
        log(event="push_opened_stored", stage=self.stage)

    # ------------------------------------------------------------------
    # Stage changes
    # ------------------------------------------------------------------
    def _transition(self, stage: str, destination: Optional[str] = None) -> None:
        if stage not in stages.ALL_STAGES:
            raise ValueError(f"Unknown launch stage: {stage!r}")
        if self.stage == stages.CLASSIC_FLOW and stage != stages.CLASSIC_FLOW:
            log(event="launch_stage_change_blocked", current=self.stage, requested=stage)
            return
        destination = destination if stage == stages.WEB_EXPERIENCE else None
        if stage == self.stage and destination == self.destination:
            return

        previous = self.stage
        if previous == stages.WEB_EXPERIENCE and stage == stages.OFFLINE_SCREEN:
            self._resume_destination = self.destination
        elif stage == stages.WEB_EXPERIENCE:
            self._resume_destination = None

        self.stage = stage
        self.destination = destination
        self.permission_prompt_visible = False
        log(event="launch_stage_changed", previous=previous, stage=stage, hasDestination=bool(destination))
        self._notify()

    def _notify(self) -> None:
        state = self.presentation()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                log(event="launch_listener_exception", errorType=type(e).__name__, error=str(e)[:300])

    def _cancel_timer(self, attr: str) -> bool:
        handle = getattr(self, attr)
        if handle is None:
            return False
        handle.cancel()
        setattr(self, attr, None)
        return True
