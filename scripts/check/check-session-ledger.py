#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""시험 세션 카운터와 답안 원장 일치 여부 점검 스크립트

사용법: python scripts/check/check-session-ledger.py <test_session_id> [--fix]
"""
import argparse
import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# 환경변수 로드
from dotenv import load_dotenv
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

from app.crud import student_question as student_question_crud, test_session as test_session_crud
from app.models.base import get_engine, get_session_factory
from app.services import answer_service, stats_service


async def check_session_ledger(test_session_id: str, fix: bool = False) -> bool:
    """세션 카운터를 원장 재집계 결과와 비교 (fix=True면 덮어쓰기)"""
    print(f"\n{'='*60}")
    print(f"세션 원장 점검: test_session_id={test_session_id}")
    print(f"{'='*60}\n")

    try:
        return await _check(test_session_id, fix)
    finally:
        await get_engine().dispose()


async def _check(test_session_id: str, fix: bool) -> bool:
    async with get_session_factory()() as session:
        test_session = await test_session_crud.get_test_session_by_id(session, test_session_id)
        if not test_session:
            print(f"[ERROR] 시험 세션을 찾을 수 없습니다: {test_session_id}")
            return False

        entries = await student_question_crud.get_student_questions_by_session(session, test_session_id)
        counters = stats_service.session_counters(entries)

        print(f"[INFO] status={test_session.status.value}, 문제 수={test_session.total_questions}")
        print(f"[INFO] 원장 항목 수={len(entries)}")
        stored = (test_session.correct_answers, test_session.incorrect_answers, test_session.flagged_answers)
        computed = (counters.correct_answers, counters.incorrect_answers, counters.flagged_answers)
        print(f"  저장된 카운터 (정답/오답/플래그): {stored}")
        print(f"  재집계 카운터 (정답/오답/플래그): {computed}")

        if stored == computed:
            print("\n[OK] 카운터 일치")
            return True

        print("\n[WARN] 카운터 불일치")
        if fix:
            await answer_service.recompute_session_counters(session, test_session)
            print("[OK] 재집계 결과로 카운터 갱신 완료")
        return fix


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("test_session_id")
    parser.add_argument("--fix", action="store_true", help="불일치 시 카운터 재계산 결과로 덮어쓰기")
    args = parser.parse_args()

    try:
        ok = asyncio.run(check_session_ledger(args.test_session_id, fix=args.fix))
        sys.exit(0 if ok else 1)
    except Exception as e:
        print(f"\n[ERROR] 에러 발생: {e.__class__.__name__}: {str(e)}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
