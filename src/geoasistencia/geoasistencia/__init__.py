"""Geoasistencia package.

Employee-side attendance engine: GPS fixes are evaluated against the
selected site's geofence and drive an ENTRADA/SALIDA session that closes
itself when the signal drops or the device leaves the zone.

Organized by feature modules (geo, location, sites, attendance) with a thin
Flask controller layer on top of plain service objects.
"""
