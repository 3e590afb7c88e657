"""
CSV export of wristband readings.
"""
import csv
import io

READING_CSV_COLUMNS = ['device_id', 'hr', 'temp', 'spo2', 'bp_sys', 'bp_dia', 'created_at']


def generate_readings_csv(readings):
    """Generate CSV export of readings in the order given.

    Args:
        readings: Reading objects (already filtered by window and device)

    Returns:
        StringIO with a header line plus one line per reading
    """
    output = io.StringIO()

    writer = csv.DictWriter(output, fieldnames=READING_CSV_COLUMNS, lineterminator='\n')
    writer.writeheader()

    for reading in readings:
        writer.writerow({
            'device_id': reading.device_id,
            'hr': reading.hr,
            'temp': reading.temp,
            'spo2': reading.spo2,
            'bp_sys': reading.bp_sys,
            'bp_dia': reading.bp_dia,
            'created_at': reading.created_at.isoformat() if reading.created_at else '',
        })

    output.seek(0)
    return output


def export_filename(now_ms: int) -> str:
    return f'wristband_data_{now_ms}.csv'
