"""
Low-pass Filter Kernel Tests
"""

import array
import math

import pytest

from core.dsp import (
    FilterParameters,
    LowpassFilterKernel,
    compute_lowpass_coefficients,
    effective_parameters,
    normalize_cutoff,
)
from core.ports import IFilterKernel


def _direct_recurrence(coefficients, samples):
    """Reference y[n] = a0 x[n] + a1 x[n-1] + a2 x[n-2] - b1 y[n-1] - b2 y[n-2]."""
    c = coefficients
    x1 = x2 = y1 = y2 = 0.0
    out = []
    for x in samples:
        y = c.a0 * x + c.a1 * x1 + c.a2 * x2 - c.b1 * y1 - c.b2 * y2
        x2, x1 = x1, x
        y2, y1 = y1, y
        out.append(y)
    return out


class TestCoefficients:
    """Coefficient derivation tests"""

    def test_symmetric_zeros(self):
        """a1 is exactly twice a0 and a2 equals a0."""
        for f in (0.001, 0.01, 0.045351, 0.25, 0.5, 0.9, 0.99):
            for r in (-20.0, -7.5, 0.0, 3.0, 20.0):
                c = compute_lowpass_coefficients(f, r)
                assert c.a1 == 2.0 * c.a0
                assert c.a2 == c.a0

    def test_poles_inside_unit_circle(self):
        """Poles stay inside the unit circle over the whole parameter range."""
        steps = 60
        for i in range(1, steps + 1):
            f = 0.99 * i / steps
            for j in range(0, 41):
                r = -20.0 + j
                c = compute_lowpass_coefficients(f, r)
                assert c.is_stable(), (f, r, c.poles())

    def test_known_values(self):
        """0 dB resonance at a quarter of Nyquist."""
        c = compute_lowpass_coefficients(0.5, 0.0)

        k = 0.5 * math.sin(math.pi * 0.5)
        c1 = 0.5 * (1.0 - k) / (1.0 + k)
        c2 = (0.5 + c1) * math.cos(math.pi * 0.5)
        c3 = (0.5 + c1 - c2) * 0.25

        assert c.a0 == pytest.approx(2.0 * c3)
        assert c.b1 == pytest.approx(-2.0 * c2, abs=1e-15)
        assert c.b2 == pytest.approx(2.0 * c1)

    def test_unity_dc_gain(self):
        """Sum of feed-forward terms equals 1 + b1 + b2 (DC gain of 1)."""
        c = compute_lowpass_coefficients(0.1, 12.0)
        assert c.a0 + c.a1 + c.a2 == pytest.approx(1.0 + c.b1 + c.b2)

    def test_normalize_cutoff_clips(self):
        """Normalized cutoff never exceeds 0.99."""
        assert normalize_cutoff(1000.0, 44100.0) == pytest.approx(2000.0 / 44100.0)
        assert normalize_cutoff(22050.0, 44100.0) == 0.99
        assert normalize_cutoff(30000.0, 44100.0) == 0.99

    def test_effective_parameters_clamp(self):
        """Cutoff below 12 Hz and resonance outside +-20 dB are clamped."""
        f, r = effective_parameters(1.0, 35.0, 48000.0)
        assert f == pytest.approx(24.0 / 48000.0)
        assert r == 20.0

        _, r = effective_parameters(1000.0, -99.0, 48000.0)
        assert r == -20.0


class TestKernelProcess:
    """Per-sample processing tests"""

    def test_satisfies_kernel_protocol(self, parameters):
        """The kernel implements the IFilterKernel capability."""
        assert isinstance(LowpassFilterKernel(parameters), IFilterKernel)

    def test_impulse_matches_recurrence(self, parameters):
        """Impulse response at 44.1 kHz / 1 kHz / 0 dB matches the closed-form recurrence."""
        kernel = LowpassFilterKernel(parameters)
        impulse = [1.0, 0.0, 0.0, 0.0, 0.0]
        out = [0.0] * 5

        kernel.process(impulse, out, 5)

        expected_coefficients = compute_lowpass_coefficients(2.0 * 1000.0 / 44100.0, 0.0)
        assert kernel.coefficients == expected_coefficients

        c = expected_coefficients
        assert out[0] == c.a0
        assert out[1] == c.a1 - c.b1 * out[0]
        assert out[2] == c.a2 - c.b1 * out[1] - c.b2 * out[0]
        assert out == _direct_recurrence(c, impulse)

    def test_in_place_processing(self, parameters):
        """Source and destination may be the same buffer."""
        signal = [math.sin(0.05 * n) for n in range(256)]

        separate = [0.0] * len(signal)
        LowpassFilterKernel(parameters).process(signal, separate, len(signal))

        buffer = list(signal)
        LowpassFilterKernel(parameters).process(buffer, buffer, len(buffer))

        assert buffer == separate

    def test_float32_buffers(self, parameters):
        """array('f') buffers are filtered in place."""
        buffer = array.array('f', [1.0] + [0.0] * 63)
        kernel = LowpassFilterKernel(parameters)

        kernel.process(buffer, buffer, len(buffer))

        expected = _direct_recurrence(kernel.coefficients, [1.0] + [0.0] * 63)
        assert list(buffer) == pytest.approx(expected, rel=1e-5, abs=1e-7)

    def test_deterministic(self, parameters):
        """Identical inputs give bit-identical outputs."""
        signal = [((n * 37) % 17) / 17.0 - 0.5 for n in range(500)]

        first = [0.0] * 500
        second = [0.0] * 500
        LowpassFilterKernel(parameters).process(signal, first, 500)
        LowpassFilterKernel(parameters).process(signal, second, 500)

        assert first == second

    def test_state_carries_across_buffers(self, parameters):
        """Splitting a signal into buffers does not change the output."""
        signal = [math.cos(0.3 * n) for n in range(100)]

        whole = [0.0] * 100
        LowpassFilterKernel(parameters).process(signal, whole, 100)

        kernel = LowpassFilterKernel(parameters)
        head = [0.0] * 37
        tail = [0.0] * 63
        kernel.process(signal[:37], head, 37)
        kernel.process(signal[37:], tail, 63)

        assert head + tail == whole

    def test_processes_only_frame_count(self, parameters):
        """Samples past frame_count are left untouched."""
        buffer = [1.0] * 8
        LowpassFilterKernel(parameters).process(buffer, buffer, 4)
        assert buffer[4:] == [1.0] * 4

    def test_silence_hint_passed_through(self, parameters):
        """The silence hint is returned unchanged."""
        kernel = LowpassFilterKernel(parameters)
        assert kernel.process([0.0] * 4, [0.0] * 4, 4, True) is True
        assert kernel.process([1.0] * 4, [0.0] * 4, 4, False) is False

    def test_bounded_output(self):
        """Maximum resonance does not diverge on a bounded input."""
        params = FilterParameters(cutoff_hz=5000.0, resonance_db=20.0, sample_rate=44100.0)
        kernel = LowpassFilterKernel(params)
        signal = [1.0 if (n // 20) % 2 else -1.0 for n in range(20000)]
        out = [0.0] * len(signal)

        kernel.process(signal, out, len(signal))

        assert all(math.isfinite(y) for y in out)
        assert max(abs(y) for y in out[-2000:]) < 50.0


class TestRecomputeGating:
    """Coefficient recalculation tests"""

    def test_unchanged_parameters_compute_once(self, parameters):
        """Two calls with the same parameters compute coefficients once."""
        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 16, [0.0] * 16, 16)
        kernel.process([1.0] * 16, [0.0] * 16, 16)
        assert kernel.coefficient_updates == 1

    def test_parameter_change_recomputes(self, parameters):
        """A new cutoff triggers a recalculation on the next call."""
        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 4, [0.0] * 4, 4)
        before = kernel.coefficients

        parameters.cutoff_hz = 2000.0
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        assert kernel.coefficient_updates == 2
        assert kernel.coefficients != before

    def test_change_hidden_by_clamping_does_not_recompute(self, parameters):
        """Values that clamp to the same effective pair do not recompute."""
        parameters.resonance_db = 25.0
        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        parameters.resonance_db = 40.0
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        assert kernel.coefficient_updates == 1

    def test_reset_forces_recompute(self, parameters):
        """After reset the next call recomputes even with unchanged parameters."""
        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        kernel.reset()
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        assert kernel.coefficient_updates == 2

    def test_reset_clears_history(self, parameters):
        """A reset kernel behaves like a freshly created one."""
        signal = [0.5, -0.25, 1.0, 0.0, 0.75, -1.0]

        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 32, [0.0] * 32, 32)
        kernel.reset()
        reused = [0.0] * 6
        kernel.process(signal, reused, 6)

        fresh = [0.0] * 6
        LowpassFilterKernel(parameters).process(signal, fresh, 6)

        assert reused == fresh
        state = kernel.state
        assert (state.x1, state.x2) == (signal[-1], signal[-2])

    def test_zero_length_is_noop(self, parameters):
        """frame_count == 0 leaves state, coefficients and cache unchanged."""
        kernel = LowpassFilterKernel(parameters)
        kernel.process([0.3, 0.6], [0.0, 0.0], 2)
        state_before = (kernel.state.x1, kernel.state.x2, kernel.state.y1, kernel.state.y2)
        coefficients_before = kernel.coefficients

        parameters.cutoff_hz = 3000.0
        kernel.process([], [], 0)

        assert (kernel.state.x1, kernel.state.x2, kernel.state.y1, kernel.state.y2) == state_before
        assert kernel.coefficients == coefficients_before
        assert kernel.coefficient_updates == 1

    def test_update_coefficients_keeps_cache_in_step(self, parameters):
        """After a response-path update the cache describes the coefficients in use."""
        kernel = LowpassFilterKernel(parameters)
        kernel.process([1.0] * 4, [0.0] * 4, 4)
        original = kernel.coefficients

        parameters.cutoff_hz = 200.0
        kernel.update_coefficients(parameters.cutoff_hz, parameters.resonance_db)
        parameters.cutoff_hz = 1000.0

        kernel.process([1.0] * 4, [0.0] * 4, 4)

        assert kernel.coefficients == original
        assert kernel.coefficient_updates == 3

    def test_update_coefficients_matches_process(self, parameters):
        """An update for the values in the store makes the next process() skip recomputing."""
        kernel = LowpassFilterKernel(parameters)
        kernel.update_coefficients(5.0, 99.0)
        f, r = effective_parameters(5.0, 99.0, 44100.0)
        assert kernel.coefficients == compute_lowpass_coefficients(f, r)

        kernel.update_coefficients(parameters.cutoff_hz, parameters.resonance_db)
        kernel.process([1.0] * 4, [0.0] * 4, 4)

        assert kernel.coefficient_updates == 2

    def test_update_coefficients_explicit_sample_rate(self, parameters):
        kernel = LowpassFilterKernel(parameters)
        kernel.update_coefficients(1000.0, 0.0, sample_rate=48000.0)
        f, r = effective_parameters(1000.0, 0.0, 48000.0)
        assert kernel.coefficients == compute_lowpass_coefficients(f, r)


class TestMagnitudeResponse:
    """Response evaluator tests"""

    def _kernel(self, parameters):
        kernel = LowpassFilterKernel(parameters)
        kernel.process([0.0], [0.0], 1)
        return kernel

    def test_passband_and_stopband(self, parameters):
        """Unity gain at DC, no gain at Nyquist."""
        kernel = self._kernel(parameters)
        assert kernel.evaluate_magnitude(0.0) == pytest.approx(1.0, abs=0.05)
        assert kernel.evaluate_magnitude(22050.0) == pytest.approx(0.0, abs=0.05)

    def test_resonance_peak(self):
        """Positive resonance boosts the response near the cutoff."""
        params = FilterParameters(cutoff_hz=1000.0, resonance_db=12.0, sample_rate=44100.0)
        kernel = self._kernel(params)
        peak = max(kernel.evaluate_magnitude(f) for f in range(500, 1500, 10))
        assert 20.0 * math.log10(peak) > 9.0

    def test_attenuates_above_cutoff(self, parameters):
        """Two octaves above the cutoff the gain is well below -12 dB."""
        kernel = self._kernel(parameters)
        assert 20.0 * math.log10(kernel.evaluate_magnitude(4000.0)) < -12.0

    def test_matches_complex_transfer_function(self, parameters):
        """Agrees with |H(z)| evaluated with complex arithmetic."""
        kernel = self._kernel(parameters)
        c = kernel.coefficients
        for f in (50.0, 700.0, 1000.0, 5000.0, 15000.0):
            z = complex(math.cos(math.pi * 2 * f / 44100.0), math.sin(math.pi * 2 * f / 44100.0))
            h = (c.a0 * z * z + c.a1 * z + c.a2) / (z * z + c.b1 * z + c.b2)
            assert kernel.evaluate_magnitude(f) == pytest.approx(abs(h), rel=1e-9)
