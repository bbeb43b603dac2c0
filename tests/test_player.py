from workout_app.catalog import REST, Exercise
from workout_app.feedback import FeedbackEvent
from workout_app.player import PlayerLoop, PlayerPhase, WorkoutPlayer


class RecordingFeedback:
    def __init__(self):
        self.events = []

    def play(self, event):
        self.events.append(FeedbackEvent(event))


class RecordingLink:
    def __init__(self):
        self.contexts = []
        self.timers = []
        self.controls = []

    def update_context(self, state):
        self.contexts.append(state)

    def send_timer_update(self, seconds):
        self.timers.append(seconds)

    def send_control(self, kind):
        self.controls.append(kind)


class StubVideo:
    def playable_url(self, rel):
        return f"https://videos.example.com/{rel.lstrip('/')}" if rel else None


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


SQUATS = Exercise("Squats", "/resources/squats.mp4")
HOPS = Exercise("Frog Hops", "/resources/frogHops.mp4")
PLAIN = Exercise("Mystery Move", None)


def make_player(routine=None, **kwargs):
    feedback = RecordingFeedback()
    link = RecordingLink()
    player = WorkoutPlayer(
        routine if routine is not None else [SQUATS, REST, HOPS],
        exercise_duration=5,
        rest_duration=4,
        feedback=feedback,
        video=StubVideo(),
        link=link,
        **kwargs
    )
    return player, feedback, link


def test_initial_state_is_idle_with_first_duration():
    player, feedback, _ = make_player()
    assert player.phase is PlayerPhase.IDLE
    assert player.time_remaining == 5
    assert feedback.events == []


def test_start_emits_start_and_resolves_video():
    player, feedback, link = make_player()
    assert player.start()
    assert player.phase is PlayerPhase.RUNNING
    assert feedback.events == [FeedbackEvent.START]
    assert player.video_url == "https://videos.example.com/resources/squats.mp4"
    assert link.controls == ["workoutStarted"]
    assert link.contexts[-1].current_exercise_name == "Squats"
    assert link.contexts[-1].next_exercise_name == "Rest"


def test_ticks_warn_at_three_and_advance_at_zero():
    player, feedback, link = make_player()
    player.start()
    player.tick()  # 4
    player.tick()  # 3
    assert feedback.events == [FeedbackEvent.START, FeedbackEvent.WARNING]
    player.tick()  # 2
    player.tick()  # 1
    player.tick()  # 0 -> rest
    assert feedback.events[-2:] == [FeedbackEvent.END, FeedbackEvent.START]
    assert player.index == 1
    assert player.current is REST
    assert player.time_remaining == 4
    assert player.video_url is None
    assert link.timers == [4, 3, 2, 1]


def test_runs_to_completion():
    player, feedback, link = make_player()
    finished = []
    player.on_finish = lambda p, completed: finished.append(completed)
    player.start()
    for _ in range(5 + 4 + 5):
        player.tick()
    assert player.phase is PlayerPhase.COMPLETE
    assert feedback.events[-2:] == [FeedbackEvent.END, FeedbackEvent.COMPLETE]
    assert finished == [True]
    assert player.snapshot().current_exercise_name == "Workout Complete"
    assert player.tick() is False


def test_pause_keeps_remaining_time():
    player, feedback, link = make_player()
    player.start()
    player.tick()
    assert player.pause()
    assert player.tick() is False
    assert player.time_remaining == 4
    assert player.snapshot().is_paused
    assert player.resume()
    player.tick()
    assert player.time_remaining == 3
    assert link.controls == ["workoutStarted", "workoutPaused", "workoutResumed"]


def test_toggle_pause_flips():
    player, _, _ = make_player()
    player.start()
    player.toggle_pause()
    assert player.phase is PlayerPhase.PAUSED
    player.toggle_pause()
    assert player.phase is PlayerPhase.RUNNING


def test_skip_warns_then_moves_on():
    player, feedback, _ = make_player()
    player.start()
    assert player.skip()
    assert feedback.events == [FeedbackEvent.START, FeedbackEvent.WARNING, FeedbackEvent.START]
    assert player.current is REST


def test_skip_on_last_entry_completes():
    player, feedback, _ = make_player([SQUATS])
    player.start()
    player.skip()
    assert player.phase is PlayerPhase.COMPLETE
    assert feedback.events[-1] is FeedbackEvent.COMPLETE


def test_skip_ignored_when_idle():
    player, feedback, _ = make_player()
    assert player.skip() is False
    assert feedback.events == []


def test_stop_returns_to_idle_and_releases_video():
    player, _, link = make_player()
    finished = []
    player.on_finish = lambda p, completed: finished.append((completed, p.index))
    player.start()
    player.skip()
    player.skip()
    assert player.video_url is not None
    assert player.stop()
    assert player.phase is PlayerPhase.IDLE
    assert player.video_url is None
    assert player.index == 0
    assert finished == [(False, 2)]
    assert link.controls[-1] == "workoutStopped"


def test_entry_without_video_clears_reference():
    player, _, _ = make_player([SQUATS, PLAIN])
    player.start()
    assert player.video_url
    player.skip()
    assert player.video_url is None


def test_empty_routine_does_not_start():
    player, feedback, _ = make_player([])
    assert player.start() is False
    assert player.phase is PlayerPhase.IDLE
    assert feedback.events == []


def test_media_ready_for_stale_entry_is_dropped():
    requests = []
    player, _, _ = make_player(media_request=lambda index, url: requests.append((index, url)))
    player.start()
    assert player.video_url is None
    assert requests == [(0, "https://videos.example.com/resources/squats.mp4")]
    player.skip()
    player.media_ready(0, requests[0][1], True)
    assert player.video_url is None


def test_failed_media_aborts_video():
    player, _, _ = make_player(media_request=lambda index, url: None)
    player.start()
    player.media_ready(0, "https://videos.example.com/resources/squats.mp4", False)
    assert player.video_url is None
    player.media_ready(0, "https://videos.example.com/resources/squats.mp4", True)
    assert player.video_url.endswith("squats.mp4")


def test_loop_delivers_commands_and_ticks():
    clock = FakeClock()
    player, feedback, _ = make_player()
    loop = PlayerLoop(player, tick_interval=1.0, clock=clock)

    loop.post("start")
    loop.run_once(timeout=0)
    assert loop.view["phase"] == "running"
    assert loop.view["time_remaining"] == 5

    clock.now += 1.0
    loop.run_once(timeout=0)
    assert loop.view["time_remaining"] == 4

    # a stalled loop catches up on missed ticks
    clock.now += 2.0
    loop.run_once(timeout=0)
    assert loop.view["time_remaining"] == 2


def test_loop_pause_stops_ticks():
    clock = FakeClock()
    player, _, _ = make_player()
    loop = PlayerLoop(player, clock=clock)
    loop.post("start")
    loop.run_once(timeout=0)
    loop.post("toggle")
    loop.run_once(timeout=0)
    clock.now += 5.0
    loop.run_once(timeout=0)
    assert loop.view["phase"] == "paused"
    assert loop.view["time_remaining"] == 5

    loop.post("resume")
    loop.run_once(timeout=0)
    clock.now += 1.0
    loop.run_once(timeout=0)
    assert loop.view["time_remaining"] == 4


def test_loop_routes_media_results_through_queue():
    clock = FakeClock()
    player, _, _ = make_player()
    loop = PlayerLoop(player, clock=clock)
    player.media_request = lambda index, url: loop.post("media_ready", index, url, True)
    loop.post("start")
    loop.run_once(timeout=0)
    assert loop.view["video"] is None
    loop.run_once(timeout=0)
    assert loop.view["video"]["url"].endswith("squats.mp4")
    assert loop.view["video"]["loop"] is True


def test_loop_shutdown_handles_queued_stop():
    finished = []
    player, _, link = make_player(on_finish=lambda p, completed: finished.append((completed, p.started_at)))
    loop = PlayerLoop(player, tick_interval=1.0, clock=FakeClock())
    loop.post("start")
    loop.run_once(timeout=0)

    loop.post("stop")
    loop.shutdown()
    assert player.phase is PlayerPhase.IDLE
    assert finished[0][0] is False and finished[0][1] is not None
    assert link.controls[-1] == "workoutStopped"
    assert loop.view["phase"] == "idle"
