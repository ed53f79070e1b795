import threading

import customtkinter as ctk

from .config import (
    APP_TITLE,
    BREAK_MINUTES_RANGE,
    COMPACT_GEOMETRY,
    UI_REFRESH_MS,
    WINDOW_GEOMETRY,
    WORK_MINUTES_RANGE,
)
from .utils import clamp
from .logging_setup import setup_logger
from .audio import PhaseAlarm
from .blocklist import BlockList
from .scheduler import PhaseScheduler, SchedulerSnapshot
from .process_table import PsutilProcessTable
from .enforcement import EnforcementEngine, EnforcementReport
from .drivers import enforcement_driver, tick_driver
from .presentation import PresentationStateController
from .tray import TrayController


ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("blue")


class PomodoroBlockerApp:
    def __init__(self):
        self.logger = setup_logger()
        self.logger.info("App start")

        self.root = ctk.CTk()
        self.root.title(APP_TITLE)
        self.root.geometry(WINDOW_GEOMETRY)
        self.root.resizable(False, False)
        self.root.protocol("WM_DELETE_WINDOW", self.hide_to_tray)

        self.block_list = BlockList.default()
        self.scheduler = PhaseScheduler(logger=self.logger)
        self.scheduler.add_transition_listener(PhaseAlarm(self.logger))
        self.scheduler.add_transition_listener(self._on_phase_transition)
        self.engine = EnforcementEngine(PsutilProcessTable(), logger=self.logger)

        self.presentation = PresentationStateController(
            self._set_always_on_top,
            on_compact_change=self._apply_compact_layout,
            logger=self.logger,
        )

        self._report_lock = threading.Lock()
        self._last_report: EnforcementReport | None = None

        self.tray = TrayController(
            title=APP_TITLE,
            on_show=self.show_from_tray,
            on_start=lambda: self.root.after(0, self.start_timer),
            on_pause=lambda: self.root.after(0, self.pause_timer),
            on_quit=self.quit_app,
        )

        self._build_ui()
        self._apply_defaults()

        self._tick_driver = tick_driver(self.scheduler, logger=self.logger)
        self._enforcement_driver = enforcement_driver(
            self.scheduler,
            self.engine,
            self.block_list,
            on_report=self._on_enforcement_report,
            logger=self.logger,
        )
        self._tick_driver.start()
        self._enforcement_driver.start()

    # UI
    def _build_ui(self) -> None:
        self.frame_settings = ctk.CTkFrame(self.root)
        self.frame_settings.pack(padx=18, pady=(18, 8), fill="x")

        ctk.CTkLabel(self.frame_settings, text="Settings (minutes)", font=("Arial", 14, "bold")).grid(
            row=0, column=0, columnspan=4, sticky="w", padx=12, pady=(10, 4)
        )
        ctk.CTkLabel(self.frame_settings, text="Work:").grid(row=1, column=0, sticky="w", padx=12, pady=(0, 12))
        self.work_entry = ctk.CTkEntry(self.frame_settings, width=70, justify="center")
        self.work_entry.grid(row=1, column=1, sticky="w", padx=(0, 24), pady=(0, 12))

        ctk.CTkLabel(self.frame_settings, text="Break:").grid(row=1, column=2, sticky="w", padx=12, pady=(0, 12))
        self.break_entry = ctk.CTkEntry(self.frame_settings, width=70, justify="center")
        self.break_entry.grid(row=1, column=3, sticky="w", padx=(0, 12), pady=(0, 12))

        for entry in (self.work_entry, self.break_entry):
            entry.bind("<Return>", lambda _e: self.apply_durations())
            entry.bind("<FocusOut>", lambda _e: self.apply_durations())

        self.frame_timer = ctk.CTkFrame(self.root)
        self.frame_timer.pack(padx=18, pady=8, fill="x")

        self.phase_label = ctk.CTkLabel(self.frame_timer, text="", font=("Segoe UI", 18, "bold"), anchor="w")
        self.phase_label.pack(fill="x", padx=12, pady=(12, 0))

        self.time_label = ctk.CTkLabel(self.frame_timer, text="25:00", font=("Consolas", 40, "bold"), anchor="w")
        self.time_label.pack(fill="x", padx=12, pady=(0, 12))

        self.frame_buttons = ctk.CTkFrame(self.root, fg_color="transparent")
        self.frame_buttons.pack(padx=18, pady=(0, 8), fill="x")

        self.start_btn = ctk.CTkButton(
            self.frame_buttons,
            text="Start",
            fg_color="#c0392b",
            hover_color="#e74c3c",
            command=self.start_timer,
        )
        self.start_btn.grid(row=0, column=0, padx=(0, 6), sticky="ew")

        self.pause_btn = ctk.CTkButton(
            self.frame_buttons,
            text="Pause",
            fg_color="#555555",
            hover_color="#777777",
            command=self.pause_timer,
        )
        self.pause_btn.grid(row=0, column=1, padx=6, sticky="ew")

        self.reset_btn = ctk.CTkButton(
            self.frame_buttons,
            text="Reset",
            fg_color="#7f8c8d",
            hover_color="#95a5a6",
            command=self.reset_timer,
        )
        self.reset_btn.grid(row=0, column=2, padx=(6, 0), sticky="ew")
        for col in range(3):
            self.frame_buttons.grid_columnconfigure(col, weight=1)

        self.frame_view = ctk.CTkFrame(self.root, fg_color="transparent")
        self.frame_view.pack(padx=18, pady=(0, 8), fill="x")

        self._compact_var = ctk.BooleanVar(value=False)
        self.compact_switch = ctk.CTkSwitch(
            self.frame_view,
            text="Compact view",
            variable=self._compact_var,
            command=self.toggle_compact_view,
        )
        self.compact_switch.pack(side="left", padx=(0, 12))

        self._pin_var = ctk.BooleanVar(value=False)
        self.pin_switch = ctk.CTkSwitch(
            self.frame_view,
            text="Keep on top while running",
            variable=self._pin_var,
            command=self.toggle_top_most_lock,
        )
        self.pin_switch.pack(side="left")

        self.frame_blocked = ctk.CTkFrame(self.root)
        self.frame_blocked.pack(padx=18, pady=8, fill="both", expand=True)

        ctk.CTkLabel(
            self.frame_blocked,
            text="Blocked process names while work timer is running:",
            anchor="w",
        ).pack(fill="x", padx=12, pady=(10, 4))
        self.blocked_box = ctk.CTkTextbox(self.frame_blocked, height=120)
        self.blocked_box.pack(fill="both", expand=True, padx=12, pady=(0, 8))

        self.scan_label = ctk.CTkLabel(self.frame_blocked, text="Last scan: -", text_color="gray", anchor="w")
        self.scan_label.pack(fill="x", padx=12, pady=(0, 10))

        self.footer = ctk.CTkLabel(
            self.root,
            text='Tip: Click "X" to hide to tray. Use tray menu to show or quit.',
            text_color="gray",
        )
        self.footer.pack(pady=(0, 12))

        self.root.bind("<FocusIn>", self._on_focus_in)

    def _apply_defaults(self) -> None:
        snap = self.scheduler.snapshot()
        self._write_duration_entries(snap)

        self.blocked_box.insert("1.0", "\n".join(self.block_list))
        self.blocked_box.configure(state="disabled")

        self._render(snap)
        self.root.after(UI_REFRESH_MS, self._refresh_loop)

    def _write_duration_entries(self, snap: SchedulerSnapshot) -> None:
        for entry, seconds in (
            (self.work_entry, snap.work_duration_seconds),
            (self.break_entry, snap.break_duration_seconds),
        ):
            state = entry.cget("state")
            entry.configure(state="normal")
            entry.delete(0, "end")
            entry.insert(0, str(seconds // 60))
            entry.configure(state=state)

    # Commands
    def apply_durations(self) -> bool:
        snap = self.scheduler.snapshot()
        if snap.is_running:
            return False
        try:
            work = clamp(int(self.work_entry.get().strip()), WORK_MINUTES_RANGE)
            brk = clamp(int(self.break_entry.get().strip()), BREAK_MINUTES_RANGE)
        except ValueError:
            self.logger.info("Ignoring non-numeric duration input")
            self._write_duration_entries(snap)
            return False

        if snap.has_durations(work, brk):
            self._write_duration_entries(snap)
            return True

        result = self.scheduler.set_durations(work, brk)
        self._write_duration_entries(result.snapshot)
        self._render(result.snapshot)
        return result.accepted

    def start_timer(self) -> None:
        self.apply_durations()
        self._render(self.scheduler.start())

    def pause_timer(self) -> None:
        self._render(self.scheduler.pause())

    def reset_timer(self) -> None:
        self._render(self.scheduler.reset())

    def toggle_compact_view(self) -> None:
        compact = self.presentation.toggle_compact_view()
        self._compact_var.set(compact)

    def toggle_top_most_lock(self) -> None:
        enabled = self.presentation.toggle_top_most_lock(self.scheduler.snapshot())
        self._pin_var.set(enabled)

    # Collaborators
    def _set_always_on_top(self, value: bool) -> None:
        self.root.attributes("-topmost", value)

    def _apply_compact_layout(self, compact: bool) -> None:
        hideable = (self.frame_settings, self.frame_blocked, self.footer)
        if compact:
            for widget in hideable:
                widget.pack_forget()
            self.root.geometry(COMPACT_GEOMETRY)
        else:
            self.frame_settings.pack(before=self.frame_timer, padx=18, pady=(18, 8), fill="x")
            self.frame_blocked.pack(padx=18, pady=8, fill="both", expand=True)
            self.footer.pack(pady=(0, 12))
            self.root.geometry(WINDOW_GEOMETRY)

    def _on_focus_in(self, event) -> None:
        if event.widget is self.root:
            self.presentation.on_focus_regained()

    def _on_phase_transition(self, transition) -> None:
        self.tray.set_title(f"{APP_TITLE} - {transition.current}")

    def _on_enforcement_report(self, report: EnforcementReport) -> None:
        if not report.gate:
            return
        with self._report_lock:
            self._last_report = report

    # Rendering
    def _refresh_loop(self) -> None:
        self._render(self.scheduler.snapshot())
        self.root.after(UI_REFRESH_MS, self._refresh_loop)

    def _render(self, snap: SchedulerSnapshot) -> None:
        self.presentation.sync(snap)

        if snap.is_paused:
            phase_text = f"{snap.phase_label} - paused"
        elif snap.is_idle:
            phase_text = f"{snap.phase_label} - ready"
        else:
            phase_text = snap.phase_label
        self.phase_label.configure(
            text=phase_text,
            text_color=("#e74c3c" if snap.phase == "work" else "#3498db"),
        )
        self.time_label.configure(text=snap.remaining_mmss)

        inputs_state = "disabled" if snap.is_running else "normal"
        self.work_entry.configure(state=inputs_state)
        self.break_entry.configure(state=inputs_state)
        self.start_btn.configure(state="disabled" if snap.is_running else "normal")
        self.pause_btn.configure(state="normal" if snap.is_running else "disabled")

        with self._report_lock:
            report = self._last_report
        if report is not None:
            self.scan_label.configure(
                text=(
                    f"Last scan: {len(report.terminated)} terminated, "
                    f"{len(report.failed)} failed | total {self.engine.terminated_total}"
                )
            )

    # Tray
    def hide_to_tray(self) -> None:
        self.logger.info("Hide to tray")
        self.tray.ensure_running()
        self.root.withdraw()

    def show_from_tray(self) -> None:
        self.logger.info("Show from tray")

        def _do():
            self.root.deiconify()
            self.root.lift()
            self.root.focus_force()
            self.presentation.on_focus_regained()

        self.root.after(0, _do)

    def quit_app(self) -> None:
        self.logger.info("Quit requested")
        self._tick_driver.stop()
        self._enforcement_driver.stop()

        def _do():
            try:
                self.tray.stop()
            finally:
                self.root.destroy()

        self.root.after(0, _do)

    def run(self) -> None:
        self.root.mainloop()
        self.logger.info("App stopped")


def main() -> None:
    PomodoroBlockerApp().run()
