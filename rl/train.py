from __future__ import annotations

import argparse
import os
import time
from typing import Any, Callable, Dict

import gymnasium as gym
from stable_baselines3 import PPO
from stable_baselines3.common.callbacks import CheckpointCallback, EvalCallback
from stable_baselines3.common.monitor import Monitor
from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

from arena_sim.config import load_yaml
from arena_sim.env import ArenaEnv, EnvConfig


def make_env_fn(env_cfg: Dict[str, Any], seed: int, rank: int) -> Callable[[], gym.Env]:
    """Factory to create ArenaEnv instances for vectorized training."""

    def _init() -> gym.Env:
        env = ArenaEnv(config=EnvConfig.from_dict(env_cfg), seed=seed + rank)
        return Monitor(env)

    return _init


def main() -> None:
    parser = argparse.ArgumentParser(description="Train PPO for Khepera obstacle avoidance.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/train_ppo.yaml",
        help="Path to training YAML config.",
    )
    parser.add_argument(
        "--total-timesteps",
        type=int,
        default=None,
        help="Override total training timesteps (for smoke tests).",
    )
    args = parser.parse_args()

    cfg = load_yaml(args.config)
    train_cfg = cfg["train"]
    env_cfg = cfg["env"]
    logging_cfg = cfg.get("logging", {})

    n_envs = int(train_cfg.get("n_envs", 4))
    seed = int(cfg.get("seed", 0))

    vec_env = SubprocVecEnv([make_env_fn(env_cfg, seed, i) for i in range(n_envs)])
    vec_env = VecMonitor(vec_env)

    run_root = train_cfg.get("tensorboard_log_dir", "runs")
    run_dir = os.path.join(run_root, time.strftime("%Y-%m-%d_%H-%M-%S"))
    checkpoints_dir = os.path.join(run_dir, "checkpoints")
    eval_dir = os.path.join(run_dir, "eval")
    os.makedirs(checkpoints_dir, exist_ok=True)
    os.makedirs(eval_dir, exist_ok=True)

    total_timesteps = args.total_timesteps or int(train_cfg.get("total_timesteps", 300000))

    model = PPO(
        policy=train_cfg.get("policy", "MlpPolicy"),
        env=vec_env,
        n_steps=int(train_cfg.get("n_steps", 1024)),
        batch_size=int(train_cfg.get("batch_size", 256)),
        learning_rate=float(train_cfg.get("learning_rate", 3e-4)),
        gamma=float(train_cfg.get("gamma", 0.99)),
        gae_lambda=float(train_cfg.get("gae_lambda", 0.95)),
        clip_range=float(train_cfg.get("clip_range", 0.2)),
        ent_coef=float(train_cfg.get("ent_coef", 0.0)),
        tensorboard_log=run_root,
        seed=seed,
        verbose=1,
    )

    checkpoint_callback = CheckpointCallback(
        save_freq=max(1, int(logging_cfg.get("save_freq", 50000)) // n_envs),
        save_path=checkpoints_dir,
        name_prefix="ppo_khepera",
    )

    eval_vec_env = VecMonitor(SubprocVecEnv([make_env_fn(env_cfg, seed + 1000, 0)]))
    eval_callback = EvalCallback(
        eval_vec_env,
        best_model_save_path=checkpoints_dir,
        log_path=eval_dir,
        eval_freq=max(1, int(logging_cfg.get("eval_freq", 25000)) // n_envs),
        n_eval_episodes=int(logging_cfg.get("eval_episodes", 5)),
        deterministic=True,
    )

    model.learn(
        total_timesteps=total_timesteps,
        callback=[checkpoint_callback, eval_callback],
        progress_bar=True,
    )

    model_path = os.path.join(checkpoints_dir, "final_model.zip")
    model.save(model_path)
    print(f"Training complete. Final model saved to {model_path}")


if __name__ == "__main__":
    main()
