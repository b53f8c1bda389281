from typing import Dict, List, Optional, Sequence, Tuple

from wellcontrol.schemas.pump_schedule import FluidParcel, StackState
from wellcontrol.schemas.well import FluidSegment
from wellcontrol.services.geometry.lookup import GeometryLookup
from wellcontrol.services.hydraulics.layers import merge_adjacent

VOLUME_EPS = 1e-9

# (top, bottom, parcel)
Placed = Tuple[float, float, FluidParcel]


def _same_parcel_fluid(a: FluidParcel, b: FluidParcel) -> bool:
    same_mud = (a.mud is None and b.mud is None) or (
        a.mud is not None and b.mud is not None and a.mud.id == b.mud.id
    )
    return (
        a.stage_index == b.stage_index
        and a.name == b.name
        and abs(a.density - b.density) < VOLUME_EPS
        and same_mud
    )


def merge_parcels(parcels: Sequence[FluidParcel]) -> List[FluidParcel]:
    out: List[FluidParcel] = []
    for p in parcels:
        if p.volume <= VOLUME_EPS:
            continue
        if out and _same_parcel_fluid(out[-1], p):
            out[-1] = out[-1].model_copy(update={"volume": out[-1].volume + p.volume})
        else:
            out.append(p)
    return out


def take_from_bottom(parcels: Sequence[FluidParcel], volume: float) -> Tuple[List[FluidParcel], List[FluidParcel]]:
    """Remove `volume` from the deep end; taken parcels come back deepest first."""
    remaining = list(parcels)
    taken = []
    left = volume
    while left > VOLUME_EPS and remaining:
        last = remaining[-1]
        if last.volume <= left:
            taken.append(remaining.pop())
            left -= last.volume
        else:
            remaining[-1] = last.model_copy(update={"volume": last.volume - left})
            taken.append(last.model_copy(update={"volume": left}))
            left = 0.0
    return remaining, taken


def take_from_top(parcels: Sequence[FluidParcel], volume: float) -> Tuple[List[FluidParcel], List[FluidParcel]]:
    """Remove `volume` from the shallow end; taken parcels come back shallowest first."""
    remaining = list(parcels)
    taken = []
    left = volume
    while left > VOLUME_EPS and remaining:
        first = remaining[0]
        if first.volume <= left:
            taken.append(remaining.pop(0))
            left -= first.volume
        else:
            remaining[0] = first.model_copy(update={"volume": first.volume - left})
            taken.append(first.model_copy(update={"volume": left}))
            left = 0.0
    return remaining, taken


class WellColumn:
    """
    Fluid contents of the circulation path, string then annulus, as ordered
    volume parcels (shallow first on both sides).

    Pumping pushes a parcel in at the top of the string; whatever overflows
    the string capacity leaves the bit and enters the bottom of the
    annulus, and whatever overflows the annulus capacity at surface is
    returned. Parcels are mapped to MDs only when segments are requested.

    `exit_md` is the depth where fluid leaves the string (string bottom or
    bit). Below it, down to `bit_md`, the hole holds static initial fluid.
    """

    def __init__(self, lookup: GeometryLookup, exit_md: float, bit_md: float, initial: FluidParcel):
        self.lookup = lookup
        self.exit_md = exit_md
        self.bit_md = max(bit_md, exit_md)
        self.initial = initial
        self.string_capacity = lookup.volume_in_string(0.0, exit_md)
        self.annulus_capacity = lookup.annulus_capacity(exit_md)
        self.string = merge_parcels([initial.model_copy(update={"volume": self.string_capacity})])
        self.annulus = merge_parcels([initial.model_copy(update={"volume": self.annulus_capacity})])

    def pump(self, parcel: FluidParcel) -> List[FluidParcel]:
        """
        Pump one parcel down the string.

        Returns:
            Parcels pushed out of the annulus at surface, first out first
        """
        if parcel.volume <= VOLUME_EPS:
            return []

        string = merge_parcels([parcel] + self.string)
        overflow = sum(p.volume for p in string) - self.string_capacity
        string, exited = take_from_bottom(string, overflow)

        annulus = merge_parcels(self.annulus + exited)
        overflow = sum(p.volume for p in annulus) - self.annulus_capacity
        annulus, returned = take_from_top(annulus, overflow)

        self.string = string
        self.annulus = annulus
        return merge_parcels(returned)

    # --------------------------- Positions --------------------------- #
    def placed_string(self) -> List[Placed]:
        placed = []
        cumulative = 0.0
        top = 0.0
        for p in self.string:
            cumulative += p.volume
            bottom = min(self.lookup.depth_for_string_volume(cumulative), self.exit_md)
            placed.append((top, bottom, p))
            top = bottom
        return placed

    def placed_annulus(self) -> List[Placed]:
        placed = []
        cumulative = 0.0
        bottom = self.exit_md
        for p in reversed(self.annulus):
            cumulative += p.volume
            top = max(self.lookup.depth_for_annulus_volume_from(self.exit_md, cumulative), 0.0)
            placed.append((top, bottom, p))
            bottom = top
        placed.reverse()
        if self.bit_md > self.exit_md:
            placed.append((self.exit_md, self.bit_md, self.initial))
        return placed

    def stacks(self) -> StackState:
        return StackState(
            string=_to_segments(self.placed_string()),
            annulus=_to_segments(self.placed_annulus()),
        )

    def fronts(self, stage_index: int) -> Tuple[Optional[float], Optional[float]]:
        """
        (string front, annulus front) of the fluid pumped by `stage_index`:
        deepest MD it reaches in the string and shallowest MD it reaches in
        the annulus. None where the fluid is absent.
        """
        string_md = [bottom for top, bottom, p in self.placed_string() if p.stage_index == stage_index]
        annulus_md = [top for top, bottom, p in self.placed_annulus() if p.stage_index == stage_index]
        return (max(string_md) if string_md else None, min(annulus_md) if annulus_md else None)


def _to_segments(placed: Sequence[Placed]) -> List[FluidSegment]:
    segments = [
        FluidSegment(top=top, bottom=bottom, name=p.name, density=p.density, mud=p.mud)
        for top, bottom, p in placed
        if bottom - top > VOLUME_EPS
    ]
    return merge_adjacent(segments)


def group_by_fluid(parcels: Sequence[FluidParcel], into: Optional[Dict[str, float]] = None) -> Dict[str, float]:
    """Sum parcel volumes by fluid name."""
    totals = {} if into is None else into
    for p in parcels:
        totals[p.name] = totals.get(p.name, 0.0) + p.volume
    return totals
