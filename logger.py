# logger.py

import csv
import time

import constants as c


def _flatten(data):
    """Expands per-cylinder lists into key_1 .. key_n columns."""
    flat = {}
    for key, value in data.items():
        if isinstance(value, (list, tuple)):
            for n, item in enumerate(value, start=1):
                flat[f"{key}_{n}"] = item
        else:
            flat[key] = value
    return flat


def _format(value):
    # enums (Stroke) are logged by their value, floats at three decimals
    value = getattr(value, "value", value)
    if isinstance(value, float):
        return "{:.3f}".format(value)
    return str(value)


class Logger:
    def __init__(self, driver_data, engine_data, logfile=c.LOGFILE):
        self.start_time = time.time()
        self.csv_file = open(logfile, "w", newline="")
        self.writer = csv.writer(self.csv_file)

        HEADER_KEYS = ["time_s", *_flatten(driver_data).keys(), *_flatten(engine_data).keys()]

        self.writer.writerow(HEADER_KEYS)

    # ---------------------------------------------------------------------------
    def log(self, driver_data, engine_data):
        t = time.time() - self.start_time

        ROW_VALUES = [t, *_flatten(driver_data).values(), *_flatten(engine_data).values()]

        final_row = [_format(v) for v in ROW_VALUES]
        self.writer.writerow(final_row)
        self.csv_file.flush()

    def close(self):
        self.csv_file.close()
