"""家系データの整合性エラー。

到達不能（共通の祖先がない）は例外ではなく、各クエリの戻り値 ``None`` / ``[]``
で表現する。ここに定義するのは呼び出し側へ伝播させるべきエラーのみ。
"""

from __future__ import annotations


class GeneaError(Exception):
    """genea パッケージの全エラーの基底クラス。"""


class NotPopulatedError(GeneaError):
    """スナップショット読み込み前に問い合わせた。"""


class AlreadyPopulatedError(GeneaError):
    """スナップショットを二度読み込もうとした。"""


class NotFoundError(GeneaError, LookupError):
    """参照先 ID がスナップショットに存在しない。"""


class UnexpectedTypeError(GeneaError):
    """参照・レコードの type が期待と異なる。"""


class DocumentError(GeneaError):
    """JSON:API ドキュメントの構造が不正。"""


class CycleError(GeneaError):
    """祖先の連鎖が循環している（自分自身の祖先になっている）。"""
