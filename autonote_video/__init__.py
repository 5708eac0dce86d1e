# autonote_video/__init__.py
'''
autonote_video/
    __init__.py
    __main__.py

    app.py                 # argparse + QApplication boot
    main_window.py         # QMainWindow: role switcher, dashboard page, workspace page

    domain.py              # dataclasses: User, Project, Annotation, VideoTask, AppState
    seed.py                # demo users / projects / tasks
    lifecycle.py           # task status transition table + transitions
    tracking.py            # tick() + TrackingTimer (one-second QTimer)
    annotations.py         # segment generation, description edits, polish
    dashboard.py           # DashboardController: role filter, assign, approve, export, report
    workspace.py           # WorkspaceController: open task, playback position, tracking
    ai_service.py          # Gemini report + cleanup calls, AiResult
    ai_worker.py           # QRunnable wrapper for AI calls
    export.py              # CSV tracking sheet
    config.py              # AppConfig + .env loading
    persistence.py         # atomic writes, config.json load/save, sheet save
    logging_setup.py       # logging.basicConfig wiring
    timeutils.py           # HH:MM:SS / MM:SS / Xm Ys helpers

    widgets/
      video_player.py      # QMediaPlayer + QVideoWidget + seek slider
      range_slider.py      # slider with annotation segment overlays
      task_table.py        # dashboard task table + assignee dropdown + actions
      annotation_list.py   # annotation cards (seek, edit, polish)
      time_tracker.py      # HH:MM:SS tracking badge
'''

__all__ = ["__version__", "run_app"]

__version__ = "0.1.0"


def run_app(argv=None) -> int:
    # Deferred so the core modules import without pulling in QtMultimedia.
    from .app import run_app as _run_app
    return _run_app(argv)
