"""
嵌套集合树基本使用示例
"""
import sys
import os

# 添加src到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nested_set import NestedSetSystem


def main():
    """主函数"""
    print("=" * 60)
    print("嵌套集合树 - 基本使用示例")
    print("=" * 60)

    # 1. 创建系统实例
    print("\n1. 初始化系统...")
    system = NestedSetSystem({
        "system_name": "文档目录树",
        "log_level": "INFO",
        "verify_after_mutation": True
    })
    print(f"   系统名称: {system.name}")
    print(f"   系统版本: {system.version}")

    # 2. 创建树
    print("\n2. 创建目录树...")
    result = system.create_tree("handbook", "员工手册", "folder")
    print(f"   根节点: {result['root_node']['title']} ({result['root_node']['tag']})")

    # 3. 构建树结构
    print("\n3. 构建树结构...")
    system.add_node("handbook", "root", "入职", "folder", tag="onboarding")
    system.add_node("handbook", "root", "福利", "folder", tag="benefits")
    system.add_node("handbook", "onboarding", "第一天", "file", tag="day1")
    system.add_node("handbook", "onboarding", "账号开通", "file", tag="accounts")
    system.add_node("handbook", "root", "公司简介", "file", tag="about", prepend=True)

    # 4. 打平输出
    print("\n4. 打平记录:")
    for record in system.flatten_tree("handbook"):
        indent = "  " * record.node_depth
        print(f"   {indent}{record.title:<8} [{record.node_left}, {record.node_right}] depth={record.node_depth}")

    # 5. 移动节点
    print("\n5. 把 '账号开通' 移到 '福利' 下...")
    system.move_node("handbook", "accounts", "benefits")
    repo = system.get_tree("handbook")
    print(f"   福利的后代: {[n.title for n in repo.get_descendants('benefits')]}")
    print(f"   账号开通的路径: {' / '.join(repo.require_node('accounts').get_path())}")

    # 6. 导出再重建
    print("\n6. 导出为 DataFrame 并重建...")
    frame = system.export_frame("handbook")
    print(frame[["tag", "title", "node_left", "node_right", "node_depth"]].to_string(index=False))
    copy = system.import_frame("handbook_copy", frame)
    print(f"   重建节点数: {copy.get_node_count()}")

    # 7. 校验
    print("\n7. 校验...")
    report = system.validate_tree("handbook_copy")
    print(f"   校验结果: {'通过' if report['valid'] else report['violations']}")

    stats = system.get_stats()
    print(f"\n共 {stats['tree_count']} 棵树, {stats['total_nodes']} 个节点")


if __name__ == "__main__":
    main()
