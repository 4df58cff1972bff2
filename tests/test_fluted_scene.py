import math

import numpy as np
import pytest

from errors import InvalidParameter
from scene.frame_pacer import FramePacer, RenderLoop
from scene.fluted_scene import GLOW_SHELL_SCALE, GROUP_OFFSET, FlutedGlassScene
from scene.motion import OscillatingMotion
from scene.parameters import ParameterSet
from scene.viewport import Viewport


def test_panel_is_reused_until_shape_changes() -> None:
    scene = FlutedGlassScene(viewport=Viewport((1280, 720)))

    first = scene.panel_mesh()
    assert scene.panel_mesh() is first
    assert first.profile_size == 20 * 10

    assert scene.update_parameters(flutes=21) == frozenset({"flutes"})
    second = scene.panel_mesh()
    assert second is not first
    assert second.profile_size == 21 * 10

    scene.update_parameters(flutes=21)
    assert scene.panel_mesh() is second


def test_resize_regenerates_only_when_panel_size_changes() -> None:
    scene = FlutedGlassScene(viewport=Viewport((1280, 720)))
    mesh = scene.panel_mesh()

    scene.resize((2560, 1440))
    assert scene.panel_mesh() is mesh

    scene.resize((720, 1280))
    assert scene.panel_mesh() is not mesh
    assert scene.shape_parameters().height == pytest.approx(2.0 * 1280 / 720)


def test_non_shape_updates_keep_the_panel() -> None:
    scene = FlutedGlassScene()
    mesh = scene.panel_mesh()

    scene.update_parameters(ior=2.0, base_red=0.5)

    assert scene.panel_mesh() is mesh


def test_sphere_mesh_follows_size_and_segments() -> None:
    scene = FlutedGlassScene()
    sphere = scene.sphere_mesh()

    assert scene.sphere_mesh() is sphere
    scene.update_parameters(segments=16)
    assert scene.sphere_mesh() is not sphere
    assert scene.sphere_mesh().vertex_count == 2 + 15 * 16


def test_follow_frame_output() -> None:
    scene = FlutedGlassScene(ParameterSet(), Viewport((800, 600)))

    frame = scene.frame(0.0, 0.0)

    assert frame.group_offset == GROUP_OFFSET
    assert frame.elapsed == 0.0
    assert frame.sphere.position[2] == -0.5
    assert frame.sphere.radius == pytest.approx(0.2)
    assert frame.glow is None
    assert frame.sphere.rotation == pytest.approx((0.0, 0.0, 0.05))
    assert frame.glass.transmission == 1.0
    assert frame.sphere_material.color.emissive_intensity == pytest.approx(1.5)
    assert frame.panel_mesh is scene.panel_mesh()


def test_sphere_chases_the_pointer() -> None:
    scene = FlutedGlassScene(viewport=Viewport((800, 600)))
    scene.pointer_moved((800, 0))

    xs = [scene.frame(i / 60.0, 1.0 / 60.0).sphere.position[0] for i in range(120)]

    assert all(a <= b for a, b in zip(xs, xs[1:]))
    assert 0.0 < xs[-1] < 1.0
    assert scene.motion_state.raw_target == pytest.approx((1.0, -0.5))


def test_motion_factors_apply_on_update() -> None:
    scene = FlutedGlassScene(viewport=Viewport((800, 600)))
    scene.update_parameters(smoothing=1.0, easing=1.0)
    scene.pointer_moved((400, 150))

    frame = scene.frame(0.1, 0.1)

    assert frame.sphere.position[:2] == pytest.approx((0.0, -0.75))


def test_drift_frame_output() -> None:
    scene = FlutedGlassScene(motion="drift")
    elapsed = 9.0

    frame = scene.frame(elapsed, 0.016)

    x, y = OscillatingMotion().position_at(elapsed)
    assert frame.sphere.position == pytest.approx((x, y, -1.0))
    assert frame.sphere.rotation == (0.0, 0.0, 0.0)
    assert frame.sphere_material.color.glow == pytest.approx(math.sin(elapsed * 0.5) * 0.1)


def test_drift_starts_on_its_path() -> None:
    scene = FlutedGlassScene(motion="drift")

    assert scene.motion_state.current_position == pytest.approx(OscillatingMotion().position_at(0.0))


def test_unknown_motion_mode() -> None:
    with pytest.raises(InvalidParameter):
        FlutedGlassScene(motion="spin")


def test_drift_sphere_carries_a_scaled_glow_shell() -> None:
    scene = FlutedGlassScene(motion="drift")

    glow = scene.frame(1.0, 0.016).glow

    assert glow.radius == pytest.approx(0.2 * GLOW_SHELL_SCALE)
    assert glow.opacity == pytest.approx(0.3)
    assert np.allclose(np.linalg.norm(glow.mesh.vertices, axis=1), glow.radius)
    assert scene.frame(1.1, 0.016).glow.mesh is glow.mesh

    scene.update_parameters(sphere_size=0.5)
    resized = scene.frame(1.2, 0.016).glow
    assert np.allclose(np.linalg.norm(resized.mesh.vertices, axis=1), 0.5 * GLOW_SHELL_SCALE)


def test_collapsed_window_keeps_the_last_panel() -> None:
    scene = FlutedGlassScene(viewport=Viewport((1280, 720)))
    mesh = scene.panel_mesh()

    scene.resize((0, 720))
    frame = scene.frame(1.0, 0.016)

    assert frame.panel_mesh is mesh
    assert scene.viewport.window_size == (1280, 720)


class RecordingScheduler:
    def __init__(self) -> None:
        self.delays = []
        self.callbacks = []

    def schedule(self, delay_ms, callback):
        self.delays.append(delay_ms)
        self.callbacks.append(callback)
        return len(self.delays)

    def cancel(self, handle) -> None:
        pass


def test_target_fps_updates_reach_the_pacer() -> None:
    scene = FlutedGlassScene()
    scheduler = RecordingScheduler()
    loop = RenderLoop(advance=lambda: None)
    pacer = FramePacer(loop.claim(), scheduler, target_fps=30.0, clock=lambda: 0.0)
    scene.watch("target_fps", pacer.set_target_fps)

    pacer.activate()
    assert scene.update_parameters(target_fps=10.0) == frozenset({"target_fps"})
    scheduler.callbacks[-1]()
    assert pacer.on_native_tick()
    pacer.deactivate()

    assert scheduler.delays == [pytest.approx(1000.0 / 30.0), pytest.approx(100.0)]


def test_target_fps_change_sets_the_next_release_delay() -> None:
    scene = FlutedGlassScene()
    scheduler = RecordingScheduler()
    loop = RenderLoop(advance=lambda: None)
    pacer = FramePacer(loop.claim(), scheduler, target_fps=30.0, clock=lambda: 0.0)
    scene.watch("target_fps", pacer.set_target_fps)

    scene.update_parameters(target_fps=10.0)
    pacer.activate()

    assert scheduler.delays == [pytest.approx(100.0)]


def test_watchers_only_fire_on_real_changes() -> None:
    scene = FlutedGlassScene()
    seen = []
    scene.watch("flutes", seen.append)

    scene.update_parameters(flutes=20)
    scene.update_parameters(flutes=100)

    assert seen == [50]
    with pytest.raises(InvalidParameter):
        scene.watch("sparkle", seen.append)
