# backend/opatlas/state.py

"""
アプリケーション単位で共有する状態の組み立てと、FastAPI 依存関数。

- create_app() ごとに 1回だけ build_state() を呼び、app.state.opatlas に保持する
- 各 router は Depends(get_*) で受け取るだけで、モジュールグローバルは使わない
- テストでは create_app() を呼び直すか、AppState を自前で組み立てて渡せば状態が分離される
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from opatlas.notifications.factory import build_notification_service
from opatlas.notifications.service import CompositeNotificationService, InboxNotificationSender
from opatlas.playbooks.store import PlaybookStore
from opatlas.recommendations.service import RecommendationService
from opatlas.runs.service import RunService
from opatlas.runs.store import RunStore
from opatlas.storage.memory import Clock


@dataclass
class AppState:
    """ストアと、それを使うサービスのまとまり。"""

    playbooks: PlaybookStore
    runs: RunStore
    notifications: CompositeNotificationService
    inbox: InboxNotificationSender
    run_service: RunService
    recommendation_service: RecommendationService


def build_state(
    *,
    clock: Optional[Clock] = None,
    inbox: Optional[InboxNotificationSender] = None,
) -> AppState:
    playbooks = PlaybookStore(clock=clock)
    runs = RunStore(clock=clock)
    notifications, inbox = build_notification_service(inbox)

    return AppState(
        playbooks=playbooks,
        runs=runs,
        notifications=notifications,
        inbox=inbox,
        run_service=RunService(runs, playbooks, notifications),
        recommendation_service=RecommendationService(playbooks, runs),
    )


def get_app_state(request: Request) -> AppState:
    return request.app.state.opatlas


def get_playbook_store(state: AppState = Depends(get_app_state)) -> PlaybookStore:
    return state.playbooks


def get_run_service(state: AppState = Depends(get_app_state)) -> RunService:
    return state.run_service


def get_recommendation_service(
    state: AppState = Depends(get_app_state),
) -> RecommendationService:
    return state.recommendation_service


def get_inbox(state: AppState = Depends(get_app_state)) -> InboxNotificationSender:
    return state.inbox
