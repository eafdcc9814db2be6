import math
import unittest

from drone_sim.config import ArcDirection, EndCoordMode, FlightMode, FlightParameters
from drone_sim.core.geometry import Point3
from drone_sim.core.trajectory import (
    FlightPlan,
    build_flight_plan,
    get_trajectory_generator,
    plan_position,
    position,
    register_trajectory_generator,
    sample_trajectory,
    unregister_trajectory_generator,
)


def _distance(a: Point3, b: Point3) -> float:
    return a.distance_to(b)


class TestLineTrajectory(unittest.TestCase):
    def test_endpoints_include_z_offset(self):
        start, end = Point3(0.0, 0.0, 0.0), Point3(4.0, 0.0, 1.0)
        self.assertEqual(position(0.0, start, end, FlightMode.LINE, z_offset=0.5), Point3(0.0, 0.0, 0.5))
        self.assertEqual(position(1.0, start, end, FlightMode.LINE, z_offset=0.5), Point3(4.0, 0.0, 1.5))

    def test_endpoint_exact_for_awkward_values(self):
        start, end = Point3(0.1, 0.2, 0.3), Point3(0.7, -1.3, 2.9)
        self.assertEqual(position(1.0, start, end, FlightMode.LINE), end)

    def test_midpoint(self):
        p = position(0.5, Point3(0.0, 0.0, 0.0), Point3(4.0, 2.0, 0.0), FlightMode.LINE, z_offset=0.5)
        self.assertAlmostEqual(p.x, 2.0, places=9)
        self.assertAlmostEqual(p.y, 1.0, places=9)
        self.assertAlmostEqual(p.z, 0.5, places=9)

    def test_t_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            position(1.5, Point3(0, 0, 0), Point3(1, 0, 0), FlightMode.LINE)
        with self.assertRaises(ValueError):
            position(-0.01, Point3(0, 0, 0), Point3(1, 0, 0), FlightMode.LINE)


class TestArcTrajectory(unittest.TestCase):
    def setUp(self):
        self.a = Point3(0.0, 0.0, 0.0)
        self.b = Point3(4.0, 0.0, 0.0)

    def test_endpoints(self):
        a, b = Point3(0.3, 1.1, 0.2), Point3(2.5, 3.7, 1.4)
        for direction in ArcDirection:
            p0 = position(0.0, a, b, FlightMode.ARC, direction, z_offset=0.25)
            p1 = position(1.0, a, b, FlightMode.ARC, direction, z_offset=0.25)
            self.assertLess(_distance(p0, a.with_z_offset(0.25)), 1e-6)
            self.assertLess(_distance(p1, b.with_z_offset(0.25)), 1e-6)

    def test_near_endpoints_are_continuous(self):
        p = position(1e-9, self.a, self.b, FlightMode.ARC, ArcDirection.CLOCKWISE)
        self.assertLess(_distance(p, self.a), 1e-6)
        p = position(1.0 - 1e-9, self.a, self.b, FlightMode.ARC, ArcDirection.CLOCKWISE)
        self.assertLess(_distance(p, self.b), 1e-6)

    def test_clockwise_apex_is_quarter_chord_from_midpoint(self):
        apex = position(0.5, self.a, self.b, FlightMode.ARC, ArcDirection.CLOCKWISE)
        self.assertAlmostEqual(apex.x, 2.0, places=9)
        self.assertAlmostEqual(apex.y, 1.0, places=9)
        self.assertAlmostEqual(apex.z, 0.0, places=9)

    def test_anticlockwise_is_mirror_image(self):
        a, b = Point3(0.0, 0.0, 0.0), Point3(3.0, 4.0, 0.0)
        chord = b - a
        for t in (0.2, 0.5, 0.8):
            cw = position(t, a, b, FlightMode.ARC, ArcDirection.CLOCKWISE)
            acw = position(t, a, b, FlightMode.ARC, ArcDirection.ANTICLOCKWISE)
            # Same projection onto the chord, and their midpoint lies on the chord.
            self.assertAlmostEqual((cw - a).dot(chord), (acw - a).dot(chord), places=9)
            centre = (cw + acw) * 0.5 - a
            self.assertAlmostEqual(centre.x * chord.y - centre.y * chord.x, 0.0, places=9)

    def test_apex_distance_for_diagonal_chord(self):
        a, b = Point3(0.0, 0.0, 0.0), Point3(3.0, 4.0, 0.0)
        mid = Point3(1.5, 2.0, 0.0)
        for direction in ArcDirection:
            apex = position(0.5, a, b, FlightMode.ARC, direction)
            self.assertAlmostEqual(_distance(apex, mid), 1.25, places=9)

    def test_clockwise_turns_right_seen_from_above(self):
        # Flying along +X, a clockwise arc passes through +Y.
        apex = position(0.5, self.a, self.b, FlightMode.ARC, ArcDirection.CLOCKWISE)
        self.assertGreater(apex.y, 0.0)
        apex = position(0.5, self.a, self.b, FlightMode.ARC, ArcDirection.ANTICLOCKWISE)
        self.assertLess(apex.y, 0.0)

    def test_vertical_flight_uses_x_axis(self):
        apex = position(0.5, Point3(0.0, 0.0, 0.0), Point3(0.0, 0.0, 2.0), FlightMode.ARC)
        self.assertAlmostEqual(apex.x, 0.5, places=9)
        self.assertAlmostEqual(apex.y, 0.0, places=9)
        self.assertAlmostEqual(apex.z, 1.0, places=9)

    def test_arc_stays_in_plane_of_chord_and_minor_axis(self):
        a, b = Point3(0.0, 0.0, 0.0), Point3(2.0, 0.0, 2.0)
        for t in (0.1, 0.4, 0.7):
            p = position(t, a, b, FlightMode.ARC)
            # Minor axis is horizontal and perpendicular to the chord's heading, i.e. along Y.
            self.assertAlmostEqual(p.x, p.z, places=9)

    def test_degenerate_chord_returns_start(self):
        p = Point3(1.0, 2.0, 3.0)
        for t in (0.0, 0.5, 1.0):
            self.assertEqual(position(t, p, p, FlightMode.ARC, z_offset=0.4), p)

    def test_t_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            position(2.0, self.a, self.b, FlightMode.ARC)


class TestFlightPlan(unittest.TestCase):
    def test_build_plan_converts_units_and_resolves_local_end(self):
        params = FlightParameters(
            mode="arc",
            start=(100, 0, 0),
            end=(0, 200, 50),
            end_coord_mode=EndCoordMode.LOCAL,
            heading_deg=90,
            z_offset_cm=20,
        )
        plan = build_flight_plan(params)
        self.assertEqual(plan.start, Point3(1.0, 0.0, 0.0))
        self.assertAlmostEqual(plan.end.x, 3.0, places=9)
        self.assertAlmostEqual(plan.end.y, 0.0, places=9)
        self.assertAlmostEqual(plan.end.z, 0.5, places=9)
        self.assertAlmostEqual(plan.z_offset_m, 0.2)
        self.assertAlmostEqual(plan.distance_m, math.hypot(2.0, 0.5), places=9)

    def test_sample_trajectory(self):
        plan = FlightPlan(mode=FlightMode.LINE, start=Point3(0, 0, 0), end=Point3(1, 2, 3))
        points = sample_trajectory(plan, samples=5)
        self.assertEqual(points.shape, (5, 3))
        self.assertEqual(tuple(points[0]), (0.0, 0.0, 0.0))
        self.assertEqual(tuple(points[-1]), (1.0, 2.0, 3.0))
        with self.assertRaises(ValueError):
            sample_trajectory(plan, samples=1)


class TestTrajectoryRegistry(unittest.TestCase):
    def tearDown(self):
        unregister_trajectory_generator("line")
        unregister_trajectory_generator("hover")

    def test_registered_generator_overrides_builtin(self):
        def hover(t, plan):
            return plan.start

        register_trajectory_generator("line", hover)
        plan = FlightPlan(mode=FlightMode.LINE, start=Point3(0, 0, 1), end=Point3(5, 0, 1))
        self.assertEqual(plan_position(0.7, plan), Point3(0, 0, 1))

        self.assertTrue(unregister_trajectory_generator("line"))
        self.assertAlmostEqual(plan_position(0.5, plan).x, 2.5)

    def test_duplicate_registration_raises(self):
        register_trajectory_generator("hover", lambda t, plan: plan.start)
        with self.assertRaises(ValueError):
            register_trajectory_generator("hover", lambda t, plan: plan.end)
        register_trajectory_generator("hover", lambda t, plan: plan.end, override=True)
        plan = FlightPlan(FlightMode.LINE, Point3(0, 0, 0), Point3(1, 1, 1))
        self.assertEqual(get_trajectory_generator("hover")(0.0, plan), Point3(1, 1, 1))

    def test_unknown_generator_raises(self):
        with self.assertRaises(ValueError):
            get_trajectory_generator("spiral")
        self.assertFalse(unregister_trajectory_generator("spiral"))


if __name__ == "__main__":
    unittest.main()
