"""Tests for the directional layout resolver."""

from __future__ import annotations

import math

import pytest

from barrowctl.config.models import LayoutConfig
from barrowctl.domain.commands import AddCarddon, AddCavern, Command
from barrowctl.domain.merge import apply_commands
from barrowctl.domain.model import Barrow, Position
from barrowctl.domain.shadax import parse_shadax
from barrowctl.domain.types import CavernRole, Direction, SizeClass
from barrowctl.services.layout import layout_barrow, layout_barrow_report
from tests.conftest import assert_no_overlap, position, xyz


def _build(commands: list[Command]) -> Barrow:
    return apply_commands(Barrow(), commands).barrow


def parse_and_apply(text: str) -> Barrow:
    return apply_commands(Barrow(), parse_shadax(text)).barrow


def _close(a: tuple[float, float, float], b: tuple[float, float, float]) -> bool:
    return all(math.isclose(x, y, abs_tol=1e-9) for x, y in zip(a, b, strict=True))


class TestDirectionalPlacement:
    def test_seed_at_origin_and_east_neighbour(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="hall", role=CavernRole.CENTRAL),
                    AddCavern(name="armory", direction=Direction.E, anchor="hall"),
                ]
            )
        )
        assert position(barrow, "hall") == (0.0, 0.0, 0.0)
        assert position(barrow, "armory") == (8.0, 0.0, 0.0)

    def test_spacing_uses_both_radii(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="hall", size=SizeClass.LARGE),
                    AddCavern(
                        name="pit", size=SizeClass.SMALL, direction=Direction.S, anchor="hall"
                    ),
                ]
            )
        )
        assert position(barrow, "pit") == (0.0, 0.0, 4.5 + 2.0 + 2.0)

    def test_diagonal(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="hall"),
                    AddCavern(
                        name="nook", size=SizeClass.SMALL, direction=Direction.NE, anchor="hall"
                    ),
                ]
            )
        )
        d = 7.0 * math.sqrt(0.5)
        assert _close(position(barrow, "nook"), (d, 0.0, -d))

    def test_vertical(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="hall"),
                    AddCavern(name="loft", direction=Direction.UP, anchor="hall"),
                    AddCavern(name="cellar", direction=Direction.DOWN, anchor="hall"),
                ]
            )
        )
        assert position(barrow, "loft") == (0.0, 8.0, 0.0)
        assert position(barrow, "cellar") == (0.0, -8.0, 0.0)

    def test_central_wins_over_creation_order(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="gate", direction=Direction.S, anchor="hall"),
                    AddCavern(name="hall", role=CavernRole.CENTRAL),
                ]
            )
        )
        assert position(barrow, "hall") == (0.0, 0.0, 0.0)
        assert position(barrow, "gate") == (0.0, 0.0, 8.0)

    def test_chain_resolves_through_forward_reference(self) -> None:
        barrow = layout_barrow(
            parse_and_apply("CAVERN c AT E OF b\nCAVERN b AT E OF a\nCAVERN a ROLE central")
        )
        assert position(barrow, "b") == (8.0, 0.0, 0.0)
        assert position(barrow, "c") == (16.0, 0.0, 0.0)


class TestCollisionPush:
    def test_pushed_along_direction(self) -> None:
        barrow, report = layout_barrow_report(
            _build(
                [
                    AddCavern(name="hall"),
                    AddCavern(name="a", direction=Direction.E, anchor="hall"),
                    AddCavern(name="b", direction=Direction.W, anchor="a"),
                ]
            )
        )
        assert position(barrow, "b") == (-8.0, 0.0, 0.0)
        assert report.pushed == ["b"]

    def test_siblings_in_same_direction(self) -> None:
        commands: list[Command] = [AddCavern(name="hall", role=CavernRole.CENTRAL)]
        commands += [
            AddCavern(name=f"spoke{i}", direction=Direction.E, anchor="hall") for i in range(4)
        ]
        barrow = layout_barrow(_build(commands))
        xs = [position(barrow, f"spoke{i}")[0] for i in range(4)]
        assert xs == [8.0, 16.0, 24.0, 32.0]
        assert_no_overlap(barrow)


class TestRingFallback:
    def test_lone_orphan_lands_on_ring(self) -> None:
        barrow, report = layout_barrow_report(parse_and_apply("CAVERN orphan AT N OF ghost"))
        orphan = barrow.get_cavern("orphan")
        assert orphan is not None and orphan.position is not None
        assert position(barrow, "orphan") == (12.0, 0.0, 0.0)
        assert report.ring_caverns == ["orphan"]
        assert report.dangling == ["orphan"]

    def test_orphan_beside_seed(self) -> None:
        barrow = layout_barrow(parse_and_apply("CAVERN hall\nCAVERN orphan AT N OF ghost"))
        assert position(barrow, "hall") == (0.0, 0.0, 0.0)
        assert _close(position(barrow, "orphan"), (-12.0, 0.0, 0.0))
        assert_no_overlap(barrow)

    def test_chain_follows_ring_root(self) -> None:
        barrow, report = layout_barrow_report(
            parse_and_apply("CAVERN child AT E OF orphan\nCAVERN orphan AT N OF ghost")
        )
        assert report.ring_caverns == ["orphan"]
        ox, oy, oz = position(barrow, "orphan")
        assert _close(position(barrow, "child"), (ox + 8.0, oy, oz))

    def test_cycle_resolves(self) -> None:
        barrow, report = layout_barrow_report(
            parse_and_apply("CAVERN a AT E OF b\nCAVERN b AT E OF a")
        )
        assert report.cycles == [["a", "b"]]
        assert report.ring_caverns == ["a"]
        assert position(barrow, "a") == (12.0, 0.0, 0.0)
        assert position(barrow, "b") == (20.0, 0.0, 0.0)

    def test_self_anchor(self) -> None:
        barrow = layout_barrow(parse_and_apply("CAVERN hall\nCAVERN loop AT E OF loop"))
        assert barrow.get_cavern("loop").position is not None  # type: ignore[union-attr]
        assert_no_overlap(barrow)

    def test_ring_respects_min_radius_config(self) -> None:
        config = LayoutConfig(ring_min_radius=30.0)
        barrow = layout_barrow(parse_and_apply("CAVERN orphan AT N OF ghost"), config)
        assert position(barrow, "orphan") == (30.0, 0.0, 0.0)

    def test_ring_clears_existing_footprints(self) -> None:
        text = "CAVERN hall\n" + "\n".join(
            f"CAVERN s{i} AT E OF {'hall' if i == 0 else f's{i - 1}'}" for i in range(5)
        )
        text += "\nCAVERN orphan AT N OF ghost"
        barrow = layout_barrow(parse_and_apply(text))
        # s4 sits at x=40, so the ring must clear it.
        assert math.hypot(*position(barrow, "orphan")) >= 40.0 + 3.0 + 3.0 + 2.0 - 1e-9
        assert_no_overlap(barrow)


class TestCarddons:
    def test_stacked_above_owner(self) -> None:
        barrow = layout_barrow(
            _build(
                [
                    AddCavern(name="hall"),
                    AddCavern(name="forge", direction=Direction.E, anchor="hall"),
                    AddCarddon(name="Anvil", cavern="forge"),
                    AddCarddon(name="Lamp", cavern="hall"),
                    AddCarddon(name="Hammer", cavern="forge"),
                ]
            )
        )
        anvil, lamp, hammer = (cd.position for cd in barrow.carddons)
        assert anvil is not None and lamp is not None and hammer is not None
        assert _close(xyz(anvil), (8.0, 1.2, 0.0))
        assert _close(xyz(lamp), (0.0, 1.2, 0.0))
        assert _close(xyz(hammer), (8.0, 2.1, 0.0))

    def test_ownerless_and_dangling_owner_on_ring(self) -> None:
        barrow, report = layout_barrow_report(
            _build(
                [
                    AddCavern(name="hall"),
                    AddCarddon(name="Lantern"),
                    AddCarddon(name="Idol", cavern="ghost"),
                ]
            )
        )
        assert report.ring_carddons == ["lantern", "idol"]
        lantern, idol = (cd.position for cd in barrow.carddons)
        assert lantern is not None and idol is not None
        assert math.hypot(lantern.x, lantern.z) >= 12.0 - 1e-9
        gap = math.dist(xyz(lantern), xyz(idol))
        assert gap >= 0.5 + 0.5 + 2.0 - 1e-9


class TestPurityAndDeterminism:
    def test_input_not_mutated(self) -> None:
        barrow = parse_and_apply("CAVERN hall\nCAVERN armory AT E OF hall")
        snapshot = barrow.to_snapshot()
        layout_barrow(barrow)
        assert barrow.to_snapshot() == snapshot

    def test_stale_positions_recomputed(self) -> None:
        barrow = parse_and_apply("CAVERN hall\nCAVERN armory AT E OF hall")
        barrow.caverns[1].position = Position(x=99.0, y=99.0, z=99.0)
        assert position(layout_barrow(barrow), "armory") == (8.0, 0.0, 0.0)

    def test_bit_identical_reruns(self) -> None:
        text = "\n".join(
            [
                "CAVERN hall ROLE central SIZE large",
                "CAVERN a AT NE OF hall",
                "CAVERN b AT NE OF hall SIZE small",
                "CAVERN c AT SW OF a",
                "CAVERN orphan AT N OF ghost",
                "CAVERN x AT E OF y",
                "CAVERN y AT W OF x",
                'CARDDON "Anvil" IN a',
                'CARDDON "Lantern"',
            ]
        )
        barrow = parse_and_apply(text)
        first = layout_barrow(barrow).to_snapshot()
        second = layout_barrow(barrow).to_snapshot()
        assert first == second
        assert layout_barrow(layout_barrow(barrow)).to_snapshot() == first

    def test_empty_barrow(self) -> None:
        assert layout_barrow(Barrow()) == Barrow()


class TestNonOverlap:
    @pytest.mark.parametrize("margin", [0.0, 2.0, 5.0])
    def test_messy_barrow(self, margin: float) -> None:
        lines = ["CAVERN hub ROLE central SIZE large"]
        directions = ["N", "NE", "E", "SE", "S", "SW", "W", "NW", "UP", "DOWN"]
        sizes = ["small", "medium", "large"]
        for i in range(30):
            if i < 10:
                anchor = "hub"
            elif i < 20:
                anchor = f"c{i - 10}"
            else:
                anchor = f"c{(i * 7) % 30}"
            lines.append(
                f"CAVERN c{i} AT {directions[i % 10]} OF {anchor} SIZE {sizes[i % 3]}"
            )
        lines += ["CAVERN lost AT E OF nowhere", "CAVERN p AT N OF q", "CAVERN q AT S OF p"]
        config = LayoutConfig(margin=margin)
        barrow = layout_barrow(parse_and_apply("\n".join(lines)), config)
        assert all(c.position is not None for c in barrow.caverns)
        assert_no_overlap(barrow, config)
