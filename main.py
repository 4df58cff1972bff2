"""Entry point for the fluted glass viewer."""
from __future__ import annotations

import argparse
import logging
from typing import Optional

import pygame

from rendering.camera import OrthographicCamera
from rendering.draw_system import SceneRenderer
from rendering.opengl_context import initialize_gl, resize_viewport
from scene.fluted_scene import MOTION_MODES, FlutedGlassScene
from scene.frame_pacer import FramePacer, RenderLoop
from scene.logging_config import configure_logging
from scene.parameters import ParameterSet, get_parameter_definition
from scene.pygame_timer import PygameTimerScheduler
from scene.viewport import Viewport

LOG = logging.getLogger(__name__)

WINDOWED_SIZE = (1280, 720)

# key -> (parameter, direction)
PARAMETER_KEYS = {
    pygame.K_UP: ("flutes", 1),
    pygame.K_DOWN: ("flutes", -1),
    pygame.K_RIGHT: ("curvature", 1),
    pygame.K_LEFT: ("curvature", -1),
    pygame.K_PAGEUP: ("depth", 1),
    pygame.K_PAGEDOWN: ("depth", -1),
    pygame.K_RIGHTBRACKET: ("target_fps", 1),
    pygame.K_LEFTBRACKET: ("target_fps", -1),
}


def handle_parameter_key(scene: FlutedGlassScene, key: int) -> None:
    binding = PARAMETER_KEYS.get(key)
    if binding is None:
        return
    name, direction = binding
    definition = get_parameter_definition(name)
    changed = scene.update_parameters(**{name: scene.parameters[name] + direction * definition.step})
    if changed:
        LOG.info("%s -> %s", name, scene.parameters[name])


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fluted glass viewer")
    parser.add_argument("--fps", type=float, default=None, help="frame rate cap")
    parser.add_argument("--windowed", action="store_true", help="open a window instead of fullscreen")
    parser.add_argument("--motion", choices=MOTION_MODES, default="follow", help="sphere motion mode")
    parser.add_argument("--log-level", default="INFO", help="logging level name")
    return parser.parse_args(argv)


def run(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    parameters = ParameterSet()
    if args.fps is not None:
        parameters.update(target_fps=args.fps)

    pygame.init()
    pygame.display.set_caption("Fluted Glass")
    flags = pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE
    if args.windowed:
        pygame.display.set_mode(WINDOWED_SIZE, flags)
    else:
        pygame.display.set_mode((0, 0), flags | pygame.FULLSCREEN)
    window_size = pygame.display.get_surface().get_size()
    initialize_gl(window_size)

    scene = FlutedGlassScene(parameters, Viewport(window_size), motion=args.motion)
    camera = OrthographicCamera(viewport_size=window_size)
    renderer = SceneRenderer(camera)

    start_ms = pygame.time.get_ticks()
    last_frame_ms = start_ms

    def draw_frame() -> None:
        nonlocal last_frame_ms
        now = pygame.time.get_ticks()
        elapsed = (now - start_ms) / 1000.0
        dt = (now - last_frame_ms) / 1000.0
        last_frame_ms = now
        renderer.draw(scene.frame(elapsed, dt))
        pygame.display.flip()

    render_loop = RenderLoop(advance=draw_frame, mode="always")
    scheduler = PygameTimerScheduler()
    pacer = FramePacer(
        render_loop.claim(),
        scheduler,
        target_fps=float(parameters["target_fps"]),
        clock=lambda: float(pygame.time.get_ticks()),
    )
    scene.watch("target_fps", pacer.set_target_fps)

    clock = pygame.time.Clock()
    running = True
    pacer.activate()
    try:
        while running:
            tick_started = float(pygame.time.get_ticks())
            for event in pygame.event.get():
                if scheduler.dispatch(event):
                    continue
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        handle_parameter_key(scene, event.key)
                elif event.type == pygame.VIDEORESIZE:
                    window_size = event.size
                    resize_viewport(window_size)
                    scene.resize(window_size)
                    camera.update_viewport(window_size)
                elif event.type == pygame.MOUSEMOTION:
                    scene.pointer_moved(event.pos)
                elif event.type == pygame.MOUSEWHEEL:
                    camera.zoom_by(event.y)

            if not running:
                break
            if render_loop.mode == "always":
                draw_frame()
            else:
                pacer.on_native_tick(tick_started)
            # Hand the CPU back between native ticks; pacing is the pacer's job.
            clock.tick(240)
    finally:
        pacer.deactivate()
        pygame.quit()


if __name__ == "__main__":
    run()
