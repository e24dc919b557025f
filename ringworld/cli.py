"""Click CLI commands for RingWorld."""

import logging
import math

import click

from .constants import TEXTURE_DIR
from .controller import RingLifecycleController
from .errors import RingWorldError
from .models import RingConfiguration
from .planner import validate
from .progress import TqdmProgressReporter
from .terrain import FlatSampler

logger = logging.getLogger(__name__)


def ring_options(func):
    """Shared ring configuration options."""
    options = [
        click.option('--segments', '-n', default=4, show_default=True,
                     help='Number of ring slices'),
        click.option('--width', default=300.0, show_default=True,
                     help='Ring width in metres'),
        click.option('--radius', default=10000.0, show_default=True,
                     help='Ring radius in metres'),
        click.option('--verts-width', default=16, show_default=True,
                     help='Vertices across the ring width (minus one)'),
        click.option('--verts-edge', default=2, show_default=True,
                     help='Vertices along each circumferential edge'),
        click.option('--min-index', default=-1, show_default=True,
                     help='First segment index to create'),
        click.option('--max-index', default=360, show_default=True,
                     help='Last segment index to create'),
        click.option('--lod', default=0, show_default=True,
                     help='Starting level of detail'),
        click.option('--seed', default=0, show_default=True,
                     help='Terrain noise seed'),
        click.option('--threshold', default=300.0, show_default=True,
                     help='Proximity upgrade distance in metres'),
        click.option('--flat', is_flag=True, default=False,
                     help='Flat terrain instead of fractal noise'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(segments, width, radius, verts_width, verts_edge,
                 min_index, max_index, lod, seed, threshold, **extra):
    return RingConfiguration(
        segment_count=segments, width_in_meters=width,
        radius_in_meters=radius, verts_along_width=verts_width,
        verts_along_edge=verts_edge, min_segment_index=min_index,
        max_segment_index=max_index, starting_lod=lod, seed=seed,
        proximity_threshold=threshold, **extra)


def build_sampler(flat):
    """``None`` lets the controller build its fractal sampler per generation."""
    return FlatSampler() if flat else None


@click.group()
def cli():
    """RingWorld CLI for building segmented ring-world meshes."""
    pass


@cli.command()
@ring_options
@click.option('--output', '-o', default=None, help='Output GLB file path')
@click.option('--textures/--no-textures', default=False,
              help='Export one PNG texture per segment')
@click.option('--texture-dir', default=str(TEXTURE_DIR), show_default=True,
              help='Directory for exported textures')
@click.option('--cancel-after', type=int, default=None,
              help='Stop after creating this many segments')
def generate(output, textures, texture_dir, cancel_after, flat, **ring):
    """Generate the ring and print a summary."""
    try:
        config = validate(build_config(save_texture_files=textures, **ring))
        progress = TqdmProgressReporter(cancel_after=cancel_after)
        try:
            controller = RingLifecycleController(
                config, sampler=build_sampler(flat), progress=progress,
                texture_dir=texture_dir)
            result = controller.generate()
        finally:
            progress.close()
    except RingWorldError as e:
        logger.error(f"Error generating ring: {e}")
        raise click.ClickException(str(e))

    ring_plan = controller.plan
    click.echo(f"\n{'='*50}")
    click.echo(f"Circumference: {ring_plan.circumference:,.1f} m "
               f"(uv scale {ring_plan.uv_scale_x:.3f})")
    click.echo(f"Per segment: {ring_plan.vertex_count} verts, "
               f"{ring_plan.index_count} indices")
    status = "cancelled" if result.cancelled else "complete"
    click.echo(f"Segments: {result.count} of {result.total} ({status})")
    for segment in controller.registry:
        p = segment.placement
        click.echo(f"  [{segment.index:3d}] {p.start_angle:7.2f}° to "
                   f"{p.end_angle:7.2f}°  lod={segment.lod}")
    if output:
        try:
            path = controller.export_glb(output)
        except RingWorldError as e:
            raise click.ClickException(str(e))
        click.echo(f"\nGLB: {path}")
    click.echo(f"{'='*50}")


@cli.command()
@ring_options
@click.option('--steps', default=20, show_default=True,
              help='Number of one-second scheduler steps')
@click.option('--speed', default=500.0, show_default=True,
              help='Observer speed along the ring in metres per step')
@click.option('--start-angle', default=0.0, show_default=True,
              help='Observer start angle in degrees')
@click.option('--target-lod', default=0, show_default=True,
              help='LOD applied to upgraded segments')
def walk(steps, speed, start_angle, target_lod, flat, **ring):
    """Walk an observer along the ring floor and report LOD upgrades."""
    try:
        config = validate(build_config(target_lod=target_lod, **ring))
        controller = RingLifecycleController(config,
                                             sampler=build_sampler(flat))
        controller.generate()
    except RingWorldError as e:
        logger.error(f"Error generating ring: {e}")
        raise click.ClickException(str(e))

    radius = config.radius_in_meters
    position = {}

    def observer():
        return position.get("xyz")

    controller.set_observer(observer)
    controller.start()
    upgrades = 0
    for step in range(steps):
        angle = math.radians(start_angle) + step * speed / radius
        position["xyz"] = (radius * math.sin(angle),
                           -radius * math.cos(angle), 0.0)
        index = controller.step(float(step) * config.tick_interval)
        if index is not None:
            upgrades += 1
            click.echo(f"[step {step:3d}] upgraded segment {index} "
                       f"to lod {config.target_lod} at "
                       f"{math.degrees(angle) % 360:.1f}°")
    controller.stop()
    click.echo(f"{upgrades} upgrades in {steps} steps, "
               f"{len(controller.registry)} live segments")


if __name__ == '__main__':
    cli()
