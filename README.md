# bbkmeasure

The building blocks of a broadband speed test:

* a small JSON value type and parser. The parser can skip C-style comments
  and can read several concatenated JSON documents from one string;
* the arithmetic that turns byte counts and sample times into Mbit/s and
  latency figures;
* the progress bookkeeping that decides how large each download or upload
  request should be;
* the message handling for the websocket ping exchange and the HTTP latency
  probe;
* option handling, state tracking and message helpers for the measurement
  agent, the component that talks to the client user interface.

The package uses only the standard library and needs Python 3.10 or later.

## JSON

```python
from bbkmeasure.jsonparse import parse, parse_multi, JsonParse, JsonParseError

doc = parse('{"k1": "v1", "k2": 42, "k3": ["a", 123, true, false, null]}')
doc["k1"].string_value()     # "v1"
doc["k2"].int_value()        # 42
doc["k3"][4].is_null()       # True
doc["missing"].is_null()     # a missing key gives null, not an error

text = """{
  // a comment
  "a": 1, /* another */ "b": "text"
}"""
parse(text, JsonParse.COMMENTS)["b"].string_value()   # "text"

try:
    parse("[1, 2,")
except JsonParseError as exc:
    print(exc)
```

`parse(text, strategy=JsonParse.STANDARD)` raises `JsonParseError` (a
`ValueError`) on malformed input, on nesting deeper than 200 levels and on
trailing garbage.

`parse_multi(text, strategy=JsonParse.STANDARD)` reads whitespace-separated
documents one after another and never raises. It returns a `MultiParse` with
`values` (the documents read), `stop_pos` (where parsing stopped), `error`
(the message of the failure, if any) and `ok`.

`bbkmeasure.jsonvalue.Json` wraps a Python value (`None`, `bool`, numbers,
`str`, mappings with string keys, iterables, or anything with a `to_json()`
method). Its accessors fall back to a neutral value when the type does not
match: `number_value()`, `int_value()`, `bool_value()`, `string_value()`,
`array_items()` and `object_items()`. Other members:

* `type()` returns a `JsonType`; `is_null()`, `is_number()` and so on test it.
* `dump()` serialises the value with `", "` and `": "` separators and object
  keys in sorted order; non-finite numbers are written as `null`.
* `has_shape(types)` checks that an object has fields of the given types and
  returns a `ShapeCheck`, which is truthy on success and carries an `error`
  message otherwise.

Values are hashable and ordered. Numbers compare by numeric value, so
`Json(42) == Json(42.0)`; values of different types order by `JsonType`.

## Measurement arithmetic

```python
from bbkmeasure.metrics import (
    add_overhead_mbps, calculate_latency, download_connection_target,
    f_value, json_obj,
)

add_overhead_mbps(12_500_000, 10.0)      # Mbit/s with protocol overhead added
calculate_latency([0.012, 0.011, 0.015, 0.010, 0.013, 0.030])
                                          # mean of the best 60 % in ms, as text;
                                          # "" with fewer than 5 samples
download_connection_target(180.0, 10)    # 24: connection count for this speed
json_obj("ticket", "abc")                # '{"ticket": "abc"}'
f_value(0.5)                             # "0.5" (printf "%g" formatting)
```

## Progress tracking

`bbkmeasure.progress.ProgressTracker(duration=10.0, no_conn=4)` holds the
state of one download or upload measurement. The duration is clamped to
between 2 and 20 seconds.

* `do_test_progress(mbps, duration, no_conn)` records a speed sample and
  returns a `ProgressStatus` (`IGNORED`, `PROGRESS`, `WINDING_DOWN` or
  `FINISHED`). The reported speed may not drop in the last half second, and
  no new requests are started in the last 0.35 seconds.
* `notify_bytes_loaded(n)` adds to the byte count;
  `notify_bytes_and_duration(count, duration)` records a server-side sample.
* `load_size(elapsed, current_connections)` gives the size of the next
  request in bytes, between 6 000 and 40 000 000. A result of 0 means that no
  request should be made now.
* `set_speedlimit(limit_mbps)` sets a speed limit (at least 0.5 Mbit/s):
  requests are sized for it, `load_size` returns 0 while the measured speed
  is above it, and `wake_up_requested` is set when the speed falls below it.
* `connection_lost()` finishes the test, keeping the speed if more than half
  of it was done and giving `"-1"` otherwise; `timeout()` finishes with `"-1"`.
* `current_progress()` gives the fraction done; `result` holds the final
  speed as text, or `None` while running.

`UploadInfoParser.feed(data)` takes the server's streamed upload reports as
they arrive (bytes or text) and returns a list of `(bytes, seconds)` tuples,
one for each complete `"<bytes> <seconds>\r\n"` line. Malformed lines are
logged and skipped.

## Latency

`bbkmeasure.rping.RpingSession` carries out the websocket ping exchange:

* `start_message()` gives the first message, `"rping start"`.
* `handle_message(msg)` takes each server message and returns the reply to
  send, or `None` when the exchange is over. After 12 samples it replies
  `"rping end"`; the server's `latency_result` then becomes `result`.

`LatencyProbe(ticket)` is the fallback over plain HTTP:

* `next_request(now)` gives the path of the next `/pingpong/<n>` request.
* `response(contents, now)` records a reply and returns whether to go on.
  After 12 samples it sets `result` with `calculate_latency`.

## Agent helpers

`bbkmeasure.options`:

* `AgentSettings.handle_option(name, value)` applies one configuration
  option, such as `Measure.Webserver`, `Measure.Server`,
  `Measure.LoadDuration`, `Measure.SpeedLimit`, `Measure.ProxyServerPort`,
  `Client.<attr>` or `Report.<attr>`, and returns `False` for options it
  ignores. An unusable `Measure.LocalAddress` raises `OptionError`.
* `AgentSettings.default_config(hashkey)` builds the fallback server settings
  as JSON text.
* `is_valid_hashkey(key)` checks the format of a user key (12–40 hex digits
  and dashes); `hashkey_cookie_domain(hostname)` gives the cookie domain to
  store it under.

`bbkmeasure.agent`:

* `TestLifecycle` tracks a `MeasurementState` through `start()`, `abort()`,
  `finish()` and `reset()`, raising `LifecycleError` when a command does not
  fit the current state.
* `task_progress_json` and `task_complete_json` build message arguments for
  the client.
* `insert_hashkey(result, newkey, hashkey)` puts a known key into a settings
  document.
* `log_sent_status(result)` reads the server's reply to a log upload and
  gives `"OK"` or `"NOK"`.

`bbkmeasure.defs` describes the client: `app_name(system, machine)`,
`hardware_model()`, `os_info()`, and the constants `APP_NAME`, `APP_VERSION`,
`BUILD_VERSION` and `USER_AGENT`.

## What the package does not do

It opens no network connections. There is no HTTP or websocket client, no
event loop or task scheduler driving the measurement, no cookie or key
storage, no user interface and no command-line program. The classes here
decide what to request and how to interpret what comes back; sending and
receiving the data is left to the caller.