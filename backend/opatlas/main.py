# backend/opatlas/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- Playbook / Run の CRUD エンドポイントを公開する
- チェックリスト・進捗・Run 集計・おすすめ Playbook などの導出結果を公開する
- 担当割り当て・メンション・完了の通知を受信箱として公開する
"""

from typing import Optional

from fastapi import FastAPI

from opatlas.activity.router import router as activity_router
from opatlas.notifications.router import router as notifications_router
from opatlas.playbooks.router import router as playbooks_router
from opatlas.recommendations.router import router as recommendations_router
from opatlas.runs.router import router as runs_router
from opatlas.state import AppState, build_state


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    ストアはここで 1回だけ組み立て、app.state 経由で各ルーターに注入する。
    呼び出すたびに空のストアを持つ新しいアプリになる。
    """
    app = FastAPI(title="OpAtlas Backend")
    app.state.opatlas = state or build_state()

    # ルーター登録
    app.include_router(playbooks_router)
    app.include_router(runs_router)
    app.include_router(recommendations_router)
    app.include_router(activity_router)
    app.include_router(notifications_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
