# examples/gui.py
from __future__ import annotations

import logging
import random
import tkinter as tk
from tkinter import ttk, messagebox

from blob3d import DelaunayBlob, BlobConfig
from blob3d.geom import Pt
from blob3d.surface import validate_surface

from demo_blob import BlobBoid, random_in_sphere

import matplotlib
matplotlib.use("TkAgg")
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

BLOB_CENTER = Pt(0.0, 5.0, 0.0)
FRAME_MS = 60


def parse_points_from_text(text: str):
    """
    Парсить точки з багаторядкового тексту.
    Кожен рядок: x y z або x, y, z.
    Повертає список (x,y,z) як float.
    """
    points = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue  # пропускаємо пусті строки і коментарі
        parts = line.replace(",", " ").split()
        if len(parts) != 3:
            raise ValueError(f"Рядок {lineno}: очікується 3 числа, отримано: {len(parts)}")
        try:
            x, y, z = map(float, parts)
        except ValueError:
            raise ValueError(f"Рядок {lineno}: не вдалось прочитати числа '{line}'")
        points.append((x, y, z))
    return points


class BlobApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("Delaunay Blob")
        self.geometry("820x720")

        self.blob = DelaunayBlob(BlobConfig(color=(0.3, 0.5, 0.9), alpha=0.85))
        self.flock: list[BlobBoid] = []
        self.time = 0.0
        self._after_id = None

        self.fig = None
        self.ax = None
        self.canvas = None

        self._build_widgets()

    def _build_widgets(self):
        main = ttk.Frame(self, padding=10)
        main.pack(fill="both", expand=True)

        # --- Параметри ---
        input_frame = ttk.LabelFrame(main, text="Параметри")
        input_frame.pack(fill="x", pady=5)

        ttk.Label(input_frame, text="Кількість керуючих точок:").grid(row=0, column=0, sticky="w", padx=5, pady=5)
        self.n_entry = ttk.Entry(input_frame, width=10)
        self.n_entry.insert(0, "60")
        self.n_entry.grid(row=0, column=1, sticky="w", padx=5, pady=5)

        self.smooth_var = tk.BooleanVar(value=True)
        ttk.Checkbutton(input_frame, text="Згладжені нормалі", variable=self.smooth_var,
                        command=self._toggle_smooth).grid(row=0, column=2, sticky="w", padx=5)

        self.wire_var = tk.BooleanVar(value=True)
        ttk.Checkbutton(input_frame, text="Каркас", variable=self.wire_var).grid(row=0, column=3, sticky="w", padx=5)

        # --- Поле для ручного вводу ---
        manual_frame = ttk.LabelFrame(main, text="Додаткові точки (одна точка - один рядок)")
        manual_frame.pack(fill="x", pady=5)
        self.points_text = tk.Text(manual_frame, height=4, wrap="none")
        self.points_text.pack(fill="x", padx=5, pady=5)
        self.points_text.insert("1.0", "# Приклад:\n# 0 12 0\n")

        btns = ttk.Frame(main)
        btns.pack(fill="x", pady=5)
        ttk.Button(btns, text="Засіяти", command=self.seed).pack(side="left", expand=True, fill="x")
        ttk.Button(btns, text="Старт / Пауза", command=self.toggle_animation).pack(side="left", expand=True, fill="x")

        # --- Результати ---
        result_frame = ttk.LabelFrame(main, text="Результати")
        result_frame.pack(fill="x", pady=5)
        self.tets_var = tk.StringVar(value="—")
        self.surface_var = tk.StringVar(value="—")
        self.valid_var = tk.StringVar(value="—")
        for row, (label, var) in enumerate((("Тетраедрів:", self.tets_var),
                                            ("Граней поверхні:", self.surface_var),
                                            ("Валідація:", self.valid_var))):
            ttk.Label(result_frame, text=label).grid(row=row, column=0, sticky="w", padx=5, pady=2)
            ttk.Label(result_frame, textvariable=var).grid(row=row, column=1, sticky="w", padx=5, pady=2)

        # --- Фрейм для 3D-графіка ---
        plot_frame = ttk.LabelFrame(main, text="3D візуалізація")
        plot_frame.pack(fill="both", expand=True, pady=5)
        self.fig = Figure(figsize=(5, 4))
        self.ax = self.fig.add_subplot(111, projection="3d")
        self.canvas = FigureCanvasTkAgg(self.fig, master=plot_frame)
        self.canvas.draw()
        self.canvas.get_tk_widget().pack(fill="both", expand=True)

    def _toggle_smooth(self):
        self.blob.set_smooth_normals(self.smooth_var.get())
        self.update_plot()

    def seed(self):
        try:
            n = int(self.n_entry.get())
            if n < 0:
                raise ValueError
        except ValueError:
            messagebox.showerror("Помилка", "Кількість точок має бути невід’ємним цілим числом.")
            return
        try:
            extra = parse_points_from_text(self.points_text.get("1.0", "end"))
        except ValueError as e:
            messagebox.showerror("Помилка парсингу точок", str(e))
            return

        rng = random.Random()
        self.blob.clear()
        ids = self.blob.add_points([random_in_sphere(rng, 5.0, BLOB_CENTER) for _ in range(n)] + extra)
        self.flock = [BlobBoid(self.blob, pid, Pt(rng.uniform(-3, 3), 0.0, rng.uniform(-3, 3))) for pid in ids]
        self.blob.retetrahedralize()
        self.update_plot()

    def toggle_animation(self):
        if self._after_id is not None:
            self.after_cancel(self._after_id)
            self._after_id = None
            return
        self._tick()

    def _tick(self):
        dt = FRAME_MS / 1000.0
        self.time += dt
        with self.blob.batch():
            for boid in self.flock:
                boid.update(self.flock, self.time, dt)
        self.update_plot()
        self._after_id = self.after(FRAME_MS, self._tick)

    def update_plot(self):
        """Перемалювати поверхню блоба з поточних буферів."""
        self.ax.clear()
        mesh = self.blob.mesh_snapshot()
        buffers = mesh.buffers

        if buffers.is_empty():
            self.ax.set_title("Немає поверхні (потрібно ≥ 4 точки)")
            self.canvas.draw()
            return

        tris = buffers.positions[buffers.indices.reshape(-1, 3)]
        colors = buffers.colors[buffers.indices.reshape(-1, 3)].mean(axis=1)
        # просте ламбертове затінення від нормалей граней
        shade = 0.35 + 0.65 * abs(buffers.normals[buffers.indices.reshape(-1, 3)].mean(axis=1) @ (0.3, 0.8, 0.5))
        colors[:, :3] *= shade.clip(0.0, 1.0)[:, None]
        edge = self.blob.config.wireframe_color if self.wire_var.get() else "none"
        self.ax.add_collection3d(Poly3DCollection(tris, facecolors=colors, edgecolors=edge, linewidths=0.3))

        c = self.blob.get_centroid()
        r = self.blob.get_bounding_radius() or 1.0
        self.ax.set_xlim(c.x - r, c.x + r)
        self.ax.set_ylim(c.y - r, c.y + r)
        self.ax.set_zlim(c.z - r, c.z + r)
        self.ax.set_xlabel("X")
        self.ax.set_ylabel("Y")
        self.ax.set_zlabel("Z")
        self.ax.set_title("Delaunay blob (surface)")
        self.canvas.draw()

        report = validate_surface(mesh.faces)
        self.tets_var.set(str(len(mesh.tetrahedra)))
        self.surface_var.set(str(len(mesh.faces)))
        if report["bad_edges"] or report["bad_normals"] or report["euler"] != 2:
            self.valid_var.set(f"Є проблеми (euler={report['euler']})")
        else:
            self.valid_var.set("OK")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = BlobApp()
    app.mainloop()
