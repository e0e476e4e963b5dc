# jjymon

A pure-Python software receiver for the JJY longwave time signal
(40 kHz / 60 kHz). It takes blocks of raw ADC samples, recovers the
amplitude-keyed carrier, locks onto the one-second bit phase, and decodes
the minute frame into a date and time. All signal processing is done in
integer, fixed-point arithmetic with 12 fractional bits and C-style
truncating division, so results are reproducible bit for bit.

## Install

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Pipeline

Samples flow through these stages:

1. `jjymon.radio.Rf` removes the DC offset (`jjymon.filters.DcBias`),
   applies automatic gain (`jjymon.filters.Agc`), runs the quadrature
   detector (`jjymon.quad_detector.QuadDetector`) and turns the envelope
   into a 0/1 pulse signal (`jjymon.radio.Binarizer`). The binarizer also
   detects beating, limits pulse width to one second and estimates signal
   quality. `Rf.process` returns the digital output bit.
2. `jjymon.synchronizer.Synchronizer` tracks candidate phases of the
   rising edge at the start of each second, locks to the best one, samples
   each second in six slots and classifies it as `JjyBit.ZERO`,
   `JjyBit.ONE`, `JjyBit.MARKER` or `JjyBit.ERROR`
   (`jjymon.phase.JjyBit`). `Synchronizer.process` returns the symbol at
   each second boundary once the phase is locked, and `None` otherwise.
3. `jjymon.decoder.Decoder` aligns those symbols to the 60-second frame
   using the markers and parses each complete frame into a
   `jjymon.timecode.JjyDateTime`. `Decoder.process` returns an
   `jjymon.decoder.Action`.

`jjymon.receiver.Receiver` ties the three stages together:

```python
from jjymon.phase import Frequency
from jjymon.receiver import Receiver

rx = Receiver()
rx.init(Frequency.WEST_60KHZ, 0)

# every 10 ms, hand over one block of 4800 ADC samples (480 kS/s)
action = rx.process(t_now_ms, samples)   # Action, or None when no bit was produced
```

Between calls each stage keeps its status for a display or logger to
read: `rx.rf.status` (an `RfStatus`: gain, amplitudes, detector levels,
beat detection, signal quality, digital output), `rx.sync.status` (a
`SyncStatus`: phase candidates, phase offset, lock state and progress,
bit-detection quality) and `rx.dec.status` (a `DecoderStatus`: sync
state, last bit and index, last decoded date and time, last parse result).

## Decoding a frame directly

```python
from jjymon.phase import JjyBit
from jjymon.timecode import JjyDateTime, ParseError

dt = JjyDateTime()
result = dt.parse(bits, year_offset=2000)   # bits: 60 JjyBit values
if result == ParseError.NONE:
    print(dt.year, dt.month, dt.day, dt.hours, dt.minutes)
```

`parse` fills in the fields and returns a `ParseError` flag set naming
any problems found (bad markers, out-of-range fields, parity, reserved
bits); it raises `ValueError` for a frame shorter than 60 bits.
`JjyDateTime.add_seconds` advances the date and time across minutes,
hours, months and years. The module also offers `is_leap_year`,
`days_in_month`, `separate_day_of_year`, `read_int` and
`check_even_parity`.

## Building blocks

- `jjymon.fixed12`: fixed-point sine/cosine table, log2, rounding and
  phase arithmetic on a 4096-step circle.
- `jjymon.phase`: precision constants, `Frequency`, `JjyBit`, phase
  arithmetic, `gcd`, `lcm` and an approximate integer `fast_sqrt`.
- `jjymon.intmath`: truncating, rounding and ceiling division, and
  clipping.
- `jjymon.history`: `RingHistory`, `RingScope` and `PeakHold` for
  windowed minimum, maximum and average.
- `jjymon.filters`: `DcBias`, `Agc`, `AntiChattering`, `Hysteresis`.
- `jjymon.timing`: `LazyTimer`, a polled timer driven by timestamps you
  supply, optionally re-arming itself each period.
- `jjymon.graphics`: `Rect`, `clip_rect`, and `TinyFont` / `Glyph` for
  compact bitmap fonts.
- `jjymon.framebuffer`: `FrameBuffer`, a 1-bit page-organised buffer
  (128x64 or 128x32) with pixels, rectangles, lines, filled ellipses,
  images, `TinyFont` text, and `commit` / `pages` to get the finished
  frame as 8-pixel-high pages.

## What this package does not do

It does not capture samples from an ADC, drive a display over SPI, or
run a monitoring screen; it ships no fonts and no command-line program.
You supply the sample blocks and timestamps, and you send the bytes from
`FrameBuffer.pages()` to a display yourself.