# dashboard_manager.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import matplotlib.pyplot as plt
from matplotlib.gridspec import GridSpec

from engine_model import stroke_display_tag


class DashboardManager:
    """Real-time telemetry window; reads the engine once per frame and never writes to it."""

    def __init__(self, engine, view_mode="side"):
        self.engine = engine
        self.view_mode = view_mode  # "side" or "front"
        self.fig = None
        self.base_ax = None
        self.piston_ax = None
        self.cycle_ax = None
        self.base_text = None
        self.enabled = True
        self.stopped = False

    def get_or_create_figure(self):
        if self.fig is None:
            plt.ion()
            self.fig = plt.figure(figsize=(16, 9))

            gs = GridSpec(2, 2, figure=self.fig,
                          width_ratios=[1, 3],
                          height_ratios=[1, 1],
                          wspace=0.4,
                          hspace=0.3)

            # Top-left: Base telemetry
            self.base_ax = self.fig.add_subplot(gs[:, 0])
            self.base_ax.axis('off')
            self.base_text = self.base_ax.text(0.05, 0.95, "", va='top', ha='left',
                                              fontsize=10, family='monospace')

            # Top-right: piston travel, 0 (TDC) at the top
            n = self.engine.config.cylinder_count
            self.piston_ax = self.fig.add_subplot(gs[0, 1])
            self.piston_ax.set_title(f"Piston Position ({self.view_mode} view)")
            self.piston_ax.set_ylim(1.05, -0.05)
            self.piston_ax.set_xticks(range(n))
            self.piston_ax.set_xticklabels([f"Cyl {i + 1}" for i in range(n)])
            self.piston_bars = self.piston_ax.bar(range(n), [0.0] * n)

            # Bottom-right: one full cycle of cylinder 1 with a cursor at the crank angle
            profile = self.engine.cycle_profile()
            self.cycle_ax = self.fig.add_subplot(gs[1, 1])
            self.cycle_ax.set_title("Cylinder 1: 720° Cycle")
            self.cycle_ax.set_xlim(0, 720)
            self.cycle_ax.set_ylim(-0.05, 1.05)
            self.cycle_ax.set_xlabel("Crank angle (°)")
            self.cycle_ax.plot(profile["theta"], profile[f"piston_{self.view_mode}"][0], label="piston")
            self.cycle_ax.plot(profile["theta"], profile["intake_lift"][0], label="intake")
            self.cycle_ax.plot(profile["theta"], profile["exhaust_lift"][0], label="exhaust")
            self.cycle_ax.legend(loc="upper right")
            self.cursor = self.cycle_ax.axvline(0.0, color="red", lw=1.5)

            self.fig.canvas.mpl_connect("key_press_event", self.on_key_press)
            self.fig.canvas.mpl_connect("close_event", self.on_close_event)

        return self.fig, self.base_ax, self.piston_ax

    def update(self, driver_data, engine_data):
        if not self.enabled:
            return

        lines = [
            "╔══════════════════════════════════╗",
            "║          BASE TELEMETRY          ║",
            "╚══════════════════════════════════╝",
            "",
            f"Mode:           {driver_data['mode']:>8}",
            f"Paused:         {str(driver_data['paused']):>8}",
            "",
            f"Crank:          {engine_data['theta']:8.1f} °",
            f"Cam:            {engine_data['cam_angle']:8.1f} °",
            f"RPM:            {engine_data['RPM']:8.1f}",
            "",
            "─ Cylinders ─",
        ]
        for i, stroke in enumerate(engine_data["stroke"]):
            lines.append(
                f"Cyl {i + 1}: {stroke.value:<11} "
                f"IN {engine_data['intake_lift'][i]:4.2f}  "
                f"EX {engine_data['exhaust_lift'][i]:4.2f}"
            )

        self.get_or_create_figure()
        self.base_text.set_text("\n".join(lines))

        positions = engine_data[f"piston_{self.view_mode}"]
        for bar, position, stroke in zip(self.piston_bars, positions, engine_data["stroke"]):
            bar.set_height(position)
            bar.set_color(stroke_display_tag(stroke))

        self.cursor.set_xdata([engine_data["theta"], engine_data["theta"]])

    def draw(self):
        if self.enabled and self.fig:
            self.fig.canvas.draw_idle()
            self.fig.canvas.flush_events()

    def close(self):
        if self.fig:
            plt.close(self.fig)
            self.fig = None

    def on_key_press(self, event):
        """Handles key presses in the matplotlib window."""
        if event.key == "q":
            self.stopped = True

    def on_close_event(self, event):
        """Handles clicking the 'X' button on the window."""
        self.stopped = True
