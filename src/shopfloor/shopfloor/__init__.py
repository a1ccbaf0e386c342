"""Shop-floor attendance & work-session tracking package.

Organized by feature modules (qr, shifts, worklogs, tasks, analytics) with a
thin Flask controller layer over service/repository layers.
"""
