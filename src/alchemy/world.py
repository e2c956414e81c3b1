import random

from esper import World


def create_world(
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> World:
    """Create an empty record world carrying the run's random source.

    Every system reads ``world.random`` unless given its own generator, so one
    seed reproduces the whole run.
    """
    world = World()
    if rng is None:
        rng = random.Random(seed)
    setattr(world, "random", rng)
    return world
